"""
Constraint assembly.

Every step runs in three phases per rank:

1. ``build_local``: reset the fields and apply the rule chain in order
2. halo exchange of the velocity fields (collective over all ranks)
3. ``finalize``: merge the two-point (no-slip) constraints into the ghost
   slots and extract the SPC lists

``ConstraintAssembler.assemble`` runs all three for a single-rank grid;
``assemble_decomposed`` drives the ranks of an in-process decomposition in
lock step.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stagbc.boundary.fields import ConstraintFields, TwoPointPatch
from stagbc.boundary.rules import CellLockRule, NoSlipRule, build_rule_chain
from stagbc.boundary.spc import extract_spc
from stagbc.grid.halo import InProcessHalo
from stagbc.grid.staggered import VELOCITY_KINDS
from stagbc.utils.bc_logging import LoggedOperation, get_logger, log_bc_summary, log_constraint_counts

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stagbc.boundary.rules import Rule, StepContext
    from stagbc.boundary.spc import ConstraintSet
    from stagbc.config.core import BCConfig
    from stagbc.grid.halo import HaloExchange
    from stagbc.grid.staggered import StaggeredGrid, SubGrid

logger = get_logger(__name__)


class ConstraintAssembler:
    """
    Turns the rule chain into constraint fields and SPC lists for one rank.

    Args:
        subgrid: Sub-domain of the rank
        rules: Rules in application order
        noslip: Two-point rule applied after the halo exchange
        halo: Ghost-layer synchronization (in-process if omitted)

    Example:
        >>> grid = StaggeredGrid.uniform([(0, 1), (0, 1), (-1, 0)], (8, 8, 8))
        >>> assembler = ConstraintAssembler.from_config(config, grid)
        >>> constraints = assembler.assemble(StepContext(time=0.0, dt=1e-3))
        >>> constraints.velocity.count
    """

    def __init__(
        self,
        subgrid: SubGrid,
        rules: Sequence[Rule],
        noslip: NoSlipRule | None = None,
        halo: HaloExchange | None = None,
    ):
        self.subgrid = subgrid
        self.rules = list(rules)
        self.noslip = noslip
        self.halo = halo if halo is not None else InProcessHalo(subgrid.grid)
        self.fields = ConstraintFields(subgrid)
        self._two_point: TwoPointPatch | None = None
        self._time: float | None = None

    @classmethod
    def from_config(
        cls,
        config: BCConfig,
        grid: StaggeredGrid,
        rank: int = 0,
        halo: HaloExchange | None = None,
    ) -> ConstraintAssembler:
        """Assembler with the rules enabled by ``config``."""
        if rank == 0:
            log_bc_summary(logger, config)
        subgrid = grid.subgrid(rank)
        rules = [rule.load(subgrid) if isinstance(rule, CellLockRule) else rule for rule in build_rule_chain(config)]
        return cls(subgrid, rules, NoSlipRule.from_config(config), halo)

    @property
    def rank(self) -> int:
        return self.subgrid.rank

    def build_local(self, ctx: StepContext):
        """Reset the fields and apply every rule; two-point constraints are held back."""
        self.fields.reset()
        for rule in self.rules:
            patch = rule(self.subgrid, self.fields.snapshot(), ctx)
            self.fields.apply(patch)
            logger.debug(f"Rank {self.rank}: rule {rule.name} constrained {patch.count()} slots")

        if self.noslip is not None:
            self._two_point = self.noslip(self.subgrid, self.fields.snapshot(), ctx)
        else:
            self._two_point = TwoPointPatch(self.subgrid)
        self._time = ctx.time

    def finalize(self) -> ConstraintSet:
        """Merge the two-point constraints and extract the local SPC lists."""
        if self._two_point is None:
            raise RuntimeError("finalize() called before build_local()")

        self.fields.apply(self._two_point)
        self._two_point = None
        constraints = extract_spc(self.fields)
        log_constraint_counts(logger, constraints, self._time)
        return constraints

    def assemble(self, ctx: StepContext) -> ConstraintSet:
        """Run all phases on a single-rank grid."""
        if self.subgrid.grid.num_ranks != 1:
            raise ValueError(
                f"assemble() handles single-rank grids only, grid has {self.subgrid.grid.num_ranks} ranks; "
                "use assemble_decomposed()"
            )
        with LoggedOperation(logger, f"constraint assembly at t={ctx.time:.6g}", logging.DEBUG):
            self.build_local(ctx)
            for kind in VELOCITY_KINDS:
                self.halo.exchange(kind, [self.fields[kind].values])
            return self.finalize()


def assemble_decomposed(
    assemblers: Sequence[ConstraintAssembler],
    ctx: StepContext,
    halo: HaloExchange | None = None,
) -> list[ConstraintSet]:
    """
    Assemble the constraints of every rank of one grid in lock step.

    Args:
        assemblers: One assembler per rank, in any order
        ctx: Step context shared by all ranks
        halo: Ghost-layer synchronization (in-process if omitted)

    Returns:
        Local constraint sets, indexed by rank
    """
    ordered = sorted(assemblers, key=lambda a: a.rank)
    grid = ordered[0].subgrid.grid
    if [a.rank for a in ordered] != list(range(grid.num_ranks)):
        raise ValueError(f"Need exactly one assembler per rank 0..{grid.num_ranks - 1}")
    if any(a.subgrid.grid is not grid for a in ordered):
        raise ValueError("All assemblers must share the same grid")
    halo = halo if halo is not None else InProcessHalo(grid)

    with LoggedOperation(logger, f"decomposed constraint assembly over {grid.num_ranks} ranks", logging.DEBUG):
        for assembler in ordered:
            assembler.build_local(ctx)
        for kind in VELOCITY_KINDS:
            halo.exchange(kind, [a.fields[kind].values for a in ordered])
        return [assembler.finalize() for assembler in ordered]
