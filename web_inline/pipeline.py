import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .dom import Node
from .errors import StageError

log = logging.getLogger(__name__)


@dataclass
class TransformContext:
    """State handed from one stage to a later one during a single run."""

    # rewritten CSS collected by the style inliner, consumed by the injector
    styles: Optional[str] = None


Stage = Callable[[Node, TransformContext], None]


class Pipeline:
    def __init__(
        self,
        stages: Sequence[Tuple[str, Stage]],
        logger: Optional[logging.Logger] = None,
    ):
        self.stages: List[Tuple[str, Stage]] = list(stages)
        self.log = logger or log

    def names(self) -> List[str]:
        return [name for name, _ in self.stages]

    def run(self, tree: Node) -> TransformContext:
        """Apply every stage in order; the first failure stops the run.

        Whatever a failing stage changed before raising is left in place.
        """
        ctx = TransformContext()
        for name, stage in self.stages:
            self.log.debug("stage: %s", name)
            try:
                stage(tree, ctx)
            except Exception as e:
                raise StageError(name, e) from e
        return ctx
