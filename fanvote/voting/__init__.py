"""Voting systems for aggregating ranked ballots."""

from .base import VotingSystem

# Voting system registry - import systems here to register them
_voting_systems: dict[str, type[VotingSystem]] = {}


def register_voting_system(system_class: type[VotingSystem]) -> type[VotingSystem]:
    """Decorator to register a voting system class under its key."""
    _voting_systems[system_class.key] = system_class
    return system_class


def get_voting_system(key: str) -> VotingSystem:
    """Return an instance of the voting system registered under ``key``.

    Raises:
        KeyError: If no system is registered under that key
    """
    return _voting_systems[key]()


def get_all_voting_systems() -> list[VotingSystem]:
    """Return instances of all registered voting systems."""
    return [system_class() for system_class in _voting_systems.values()]
