"""Movement validation — pluggable rules composed first-match-wins.

A rule is a higher-order function::

    ValidationRule = (RuleContext) -> (Move) -> ValidationResult

The context is the committed snapshot (boards + selection order); the move
is the candidate batch. A :class:`RuleSet` evaluates its rules once per
contributing source board, in board order, and returns the first failure.

Failures are values, never exceptions. A rule that raises is logged and
rejects the move: nothing commits unless every rule ran and passed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from enum import StrEnum

from pydantic import BaseModel

from dragctl.domain.models import Board, Location
from dragctl.domain.placement import (
    boards_holding,
    find_board,
    previous_item,
    project_batch,
    resolve_items,
)

logger = logging.getLogger(__name__)


class ErrorCode(StrEnum):
    """Why a move was rejected."""

    DESTINATION_NOT_FOUND = "destination_not_found"
    FORBIDDEN_BOARD_PAIR = "forbidden_board_pair"
    PARITY_ADJACENCY = "parity_adjacency"
    RULE_FAILED = "rule_failed"


class ValidationResult(BaseModel):
    """Outcome of validating one batch move."""

    model_config = {"frozen": True}

    is_allowed: bool = True
    invalid_item_ids: tuple[str, ...] = ()
    error_message: str = ""
    code: ErrorCode | None = None

    @classmethod
    def rejected(
        cls, code: ErrorCode, invalid_item_ids: Iterable[str], message: str
    ) -> ValidationResult:
        return cls(
            is_allowed=False,
            invalid_item_ids=tuple(invalid_item_ids),
            error_message=message,
            code=code,
        )


ALLOWED = ValidationResult()

RULE_FAILED_MESSAGE = "This move could not be validated."


def rule_failed(item_ids: Iterable[str]) -> ValidationResult:
    """Rejection used when a rule raises instead of returning a result."""
    return ValidationResult.rejected(ErrorCode.RULE_FAILED, item_ids, RULE_FAILED_MESSAGE)


class RuleContext(BaseModel):
    """Read-only view of the committed snapshot handed to every rule."""

    model_config = {"frozen": True}

    boards: tuple[Board, ...]
    selection: tuple[str, ...] = ()

    def board(self, board_id: str) -> Board | None:
        return find_board(self.boards, board_id)

    def moving_ids(self, item_ids: Sequence[str]) -> tuple[str, ...]:
        """Ids of *item_ids* that resolve to a current item, in order."""
        return tuple(item.id for item in resolve_items(self.boards, item_ids))


class Move(BaseModel):
    """A candidate batch move.

    Attributes:
        source: Where the drag started (the dragged item's slot).
        destination: Where the batch would land.
        item_ids: Moving items in reinsertion order.
        source_board_id: The contributing board currently being evaluated.
            Set by :class:`RuleSet`; None means "every contributing board".
    """

    model_config = {"frozen": True}

    source: Location
    destination: Location
    item_ids: tuple[str, ...]
    source_board_id: str | None = None

    def scoped(self, board_id: str) -> Move:
        return self.model_copy(update={"source_board_id": board_id})


MoveValidator = Callable[[Move], ValidationResult]
ValidationRule = Callable[[RuleContext], MoveValidator]


# ── Built-in rules ────────────────────────────────────────────────────


def destination_exists(ctx: RuleContext) -> MoveValidator:
    """Reject moves whose destination board does not resolve."""

    def validate(move: Move) -> ValidationResult:
        if ctx.board(move.destination.board_id) is not None:
            return ALLOWED
        invalid = ctx.moving_ids(move.item_ids) or move.item_ids
        return ValidationResult.rejected(
            ErrorCode.DESTINATION_NOT_FOUND,
            invalid,
            f"Destination board not found: {move.destination.board_id}",
        )

    return validate


def forbid_board_pairs(pairs: Iterable[tuple[str, str]]) -> ValidationRule:
    """Build a rule rejecting any batch that crosses a forbidden board pair.

    The whole batch is marked invalid when the board under evaluation and
    the destination form a forbidden ``(source, destination)`` pair.
    """
    forbidden = frozenset((src, dst) for src, dst in pairs)

    def rule(ctx: RuleContext) -> MoveValidator:
        def validate(move: Move) -> ValidationResult:
            dst = move.destination.board_id
            sources = (
                [move.source_board_id]
                if move.source_board_id is not None
                else [b.id for b in boards_holding(ctx.boards, move.item_ids)]
            )
            for src in sources:
                if (src, dst) in forbidden:
                    return ValidationResult.rejected(
                        ErrorCode.FORBIDDEN_BOARD_PAIR,
                        ctx.moving_ids(move.item_ids),
                        f"Items cannot move from board {src} to board {dst}.",
                    )
            return ALLOWED

        return validate

    return rule


def parity_adjacency(ctx: RuleContext) -> MoveValidator:
    """Reject even items that would land right after a non-moving even item.

    Every offending item is collected before rejecting, so the feedback can
    highlight all of them at once.
    """

    def validate(move: Move) -> ValidationResult:
        destination = ctx.board(move.destination.board_id)
        if destination is None:
            return ALLOWED
        moving = resolve_items(ctx.boards, move.item_ids)
        moving_ids = {item.id for item in moving}
        if move.source_board_id is not None:
            scope = ctx.board(move.source_board_id)
            scope_ids = set(scope.item_ids) if scope is not None else set()
            moving = [item for item in moving if item.id in scope_ids]

        projected = project_batch(ctx.boards, destination, move.item_ids, move.destination.index)
        positions = {item.id: index for index, item in enumerate(projected)}
        offending: list[str] = []
        for item in moving:
            if not item.is_even:
                continue
            before = previous_item(projected, positions[item.id])
            if before is not None and before.is_even and before.id not in moving_ids:
                offending.append(item.id)

        if not offending:
            return ALLOWED
        return ValidationResult.rejected(
            ErrorCode.PARITY_ADJACENCY,
            offending,
            "An even item cannot be placed directly after another even item.",
        )

    return validate


def allow_all(ctx: RuleContext) -> MoveValidator:
    return lambda move: ALLOWED


# ── Composition ───────────────────────────────────────────────────────


class RuleSet:
    """Ordered, first-match-wins composition of validation rules.

    A RuleSet is itself a :data:`ValidationRule`, so rule sets nest and can
    be injected anywhere a single rule is accepted.
    """

    def __init__(self, rules: Iterable[ValidationRule] = ()) -> None:
        self._rules: tuple[ValidationRule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[ValidationRule, ...]:
        return self._rules

    def extend(self, rules: Iterable[ValidationRule]) -> RuleSet:
        return RuleSet([*self._rules, *rules])

    def __len__(self) -> int:
        return len(self._rules)

    def __call__(self, ctx: RuleContext) -> MoveValidator:
        validators = [rule(ctx) for rule in self._rules]

        def validate(move: Move) -> ValidationResult:
            contributing = [b.id for b in boards_holding(ctx.boards, move.item_ids)]
            for board_id in contributing or [move.source.board_id]:
                scoped = move.scoped(board_id)
                for validator in validators:
                    result = _run(validator, scoped)
                    if not result.is_allowed:
                        return result
            return ALLOWED

        return validate


def _run(validator: MoveValidator, move: Move) -> ValidationResult:
    try:
        return validator(move)
    except Exception:
        logger.warning("Validation rule %r failed; rejecting move", validator, exc_info=True)
        return rule_failed(move.item_ids)


def default_rules(
    forbidden_pairs: Iterable[tuple[str, str]] = (),
    *,
    parity: bool = True,
) -> RuleSet:
    """The standard pipeline: destination, board pairs, then parity."""
    rules: list[ValidationRule] = [destination_exists]
    pairs = list(forbidden_pairs)
    if pairs:
        rules.append(forbid_board_pairs(pairs))
    if parity:
        rules.append(parity_adjacency)
    return RuleSet(rules)
