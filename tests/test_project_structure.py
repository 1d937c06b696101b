"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import seabattle  # noqa: F401  (import used to ensure availability)

    assert seabattle is not None


def test_submodules_exist() -> None:
    modules = [
        "seabattle.cli",
        "seabattle.config",
        "seabattle.engine.board",
        "seabattle.engine.events",
        "seabattle.engine.instrumented_match",
        "seabattle.engine.match",
        "seabattle.engine.placement",
        "seabattle.engine.player",
        "seabattle.engine.ship",
        "seabattle.engine.targeting",
        "seabattle.telemetry",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None
