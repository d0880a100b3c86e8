"""Package metadata tests."""

import tomllib
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


def _pyproject() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as fh:
        return tomllib.load(fh)


def test_version_matches_pyproject() -> None:
    from fastapi_reverselog import __version__

    assert __version__ == _pyproject()["project"]["version"]


def test_py_typed_marker_is_packaged() -> None:
    packages = _pyproject()["tool"]["hatch"]["build"]["targets"]["wheel"][
        "packages"
    ]
    assert packages == ["src/fastapi_reverselog"]
    marker = ROOT / "src" / "fastapi_reverselog" / "py.typed"
    assert marker.exists(), "py.typed marker file must exist"


def test_storage_backend_is_an_optional_extra() -> None:
    project = _pyproject()["project"]
    core = " ".join(project["dependencies"]).lower()
    assert "sqlalchemy" not in core
    assert any(
        dep.startswith("sqlalchemy")
        for dep in project["optional-dependencies"]["sqlalchemy"]
    )
    assert any(
        dep.startswith("aiosqlite")
        for dep in project["optional-dependencies"]["test"]
    )


def test_importing_package_does_not_load_sqlalchemy_contrib() -> None:
    import fastapi_reverselog

    assert "create_reconciliation_router" in fastapi_reverselog.__all__
    assert not hasattr(fastapi_reverselog, "SQLAlchemyRequestRepository")


def test_getattr_raises_for_unknown_attribute() -> None:
    import fastapi_reverselog

    with pytest.raises(AttributeError, match="no_such_thing"):
        fastapi_reverselog.no_such_thing  # noqa: B018
