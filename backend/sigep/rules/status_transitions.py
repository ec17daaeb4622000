"""
Allowed status transitions for shift schedules, weapons and functional records.

Each table maps a current status to the set of statuses it may move to.
Terminal statuses map to an empty set. Re-applying the current status is
always accepted so partial updates that resend it do not fail.
"""
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional


class InvalidTransitionError(ValueError):
    """Requested status change is not allowed from the current status."""
    pass


TransitionTable = Mapping[str, FrozenSet[str]]

SHIFT_STATUS_TRANSITIONS: TransitionTable = MappingProxyType({
    "AGENDADA": frozenset({"PRESENTE", "FALTOU", "JUSTIFICADA"}),
    "FALTOU": frozenset({"JUSTIFICADA"}),
    "PRESENTE": frozenset(),
    "JUSTIFICADA": frozenset(),
})

WEAPON_SITUATION_TRANSITIONS: TransitionTable = MappingProxyType({
    "DISPONIVEL": frozenset({"EM_USO", "MANUTENCAO", "BAIXADO"}),
    "EM_USO": frozenset({"DISPONIVEL", "MANUTENCAO"}),
    "MANUTENCAO": frozenset({"DISPONIVEL", "BAIXADO"}),
    "BAIXADO": frozenset(),
})

FUNCTIONAL_STATUS_TRANSITIONS: TransitionTable = MappingProxyType({
    "ATIVO": frozenset({"INATIVO", "APOSENTADO", "EXONERADO"}),
    "INATIVO": frozenset({"ATIVO", "APOSENTADO", "EXONERADO"}),
    "APOSENTADO": frozenset(),
    "EXONERADO": frozenset(),
})


def can_transition(table: TransitionTable, current: Optional[str], target: str) -> bool:
    if target not in table:
        return False
    if current is None or current == target:
        return True
    return target in table.get(current, frozenset())


def ensure_transition(table: TransitionTable, current: Optional[str], target: str, label: str = "status") -> None:
    if not can_transition(table, current, target):
        raise InvalidTransitionError(f"{label} cannot change from {current} to {target}")
