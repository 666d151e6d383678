"""Shared pytest configuration for the Novel Forge project."""

from __future__ import annotations

import sys
import sysconfig
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
EXTRA_PATHS = [ROOT, ROOT / "libs/python"]
for extra in EXTRA_PATHS:
    sys.path.insert(0, str(extra))

SITE_PACKAGES = Path(sysconfig.get_paths().get("purelib", ""))
if SITE_PACKAGES and str(SITE_PACKAGES) not in sys.path:
    sys.path.append(str(SITE_PACKAGES))


def blueprint_entry(number: int, title: str | None = None) -> str:
    return (
        f"Chapter {number} - {title or f'Title {number}'}\n"
        f"Connection point: picks up thread {number}\n"
        f"Payoff: payoff {number}\n"
        f"Conflict: rival {number}\n"
        f"Reward: reward {number}\n"
        f"Emotional curve: rising {number}\n"
        f"Cliffhanger: hook {number}\n"
        "Tension rating: ★★★☆☆\n"
        f"One-line plot: plot {number}"
    )


def blueprint_text(start: int, end: int) -> str:
    return "\n\n".join(blueprint_entry(number) for number in range(start, end + 1))


@pytest.fixture
def make_blueprint():
    return blueprint_text


@pytest.fixture
def make_project():
    from novel_forge_schemas import Project

    def factory(**overrides):
        values = {
            "title": "Ashes of the Sky Sect",
            "genre": ["Xianxia", "Revenge"],
            "topic": "A disowned disciple climbs back",
            "number_of_chapters": 3,
            "word_number": 100,
        }
        values.update(overrides)
        return Project(**values)

    return factory


@pytest.fixture
def mock_config():
    from novel_forge_providers import EndpointConfig

    return EndpointConfig(provider="mock", model="writer-model")
