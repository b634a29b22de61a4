"""Base stage classes for text-level and tree-level sanitizing."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from bs4.element import Tag

from .settings import SanitizerSettings

logger = logging.getLogger(__name__)


@dataclass
class TextStageResult:
    """Result from text stage processing."""
    markup: str
    finished: bool = False

    @classmethod
    def proceed(cls, markup: str) -> "TextStageResult":
        return cls(markup=markup)

    @classmethod
    def finish(cls, markup: str) -> "TextStageResult":
        """Final output; no later stage runs and no tree is built."""
        return cls(markup=markup, finished=True)


class Stage(ABC):
    """Base class for sanitizer stages."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable stage name."""
        pass

    @property
    @abstractmethod
    def slug(self) -> str:
        """Canonical slug (e.g., 'clean-tags')."""
        pass

    @abstractmethod
    def should_process(self, settings: SanitizerSettings) -> bool:
        """Return True if this stage is enabled by ``settings``."""
        pass


class TextStage(Stage):
    """Stage that rewrites the raw markup string."""

    @abstractmethod
    def process(self, markup: str, settings: SanitizerSettings) -> TextStageResult:
        """Transform markup text."""
        pass


class TreeStage(Stage):
    """Stage that mutates the parsed tree in place."""

    @abstractmethod
    def process(self, root: Tag, settings: SanitizerSettings) -> None:
        """Transform the tree under ``root``."""
        pass


class TextStageChain:
    """Chain of text stages executed in order."""

    def __init__(self, stages: Optional[list[TextStage]] = None):
        self.stages = stages or []

    def add(self, stage: TextStage) -> None:
        self.stages.append(stage)

    def execute(self, markup: str, settings: SanitizerSettings) -> TextStageResult:
        """Execute the chain. A finished result stops it."""
        for stage in self.stages:
            if not stage.should_process(settings):
                continue
            logger.debug("Running text stage %s", stage.slug)
            result = stage.process(markup, settings)
            if result.finished:
                return result
            markup = result.markup
        return TextStageResult.proceed(markup)


class TreeStageChain:
    """Chain of tree stages executed in order."""

    def __init__(self, stages: Optional[list[TreeStage]] = None):
        self.stages = stages or []

    def add(self, stage: TreeStage) -> None:
        self.stages.append(stage)

    def execute(self, root: Tag, settings: SanitizerSettings) -> None:
        for stage in self.stages:
            if stage.should_process(settings):
                logger.debug("Running tree stage %s", stage.slug)
                stage.process(root, settings)
