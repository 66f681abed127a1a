from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.property)


@pytest.fixture(scope="session")
def isolated_env() -> None:
    """Property tests touch neither config files nor the environment.

    Replaces the function-scoped autouse fixture, which hypothesis rejects.
    """
