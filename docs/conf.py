"""Sphinx configuration for fastapi-reverselog."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from fastapi_reverselog import __version__  # noqa: E402

project = "fastapi-reverselog"
release = __version__
version = ".".join(release.split(".")[:2])
html_title = f"fastapi-reverselog {release}"

extensions = [
    "myst_parser",
    "autodoc2",
    "sphinx.ext.intersphinx",
]

autodoc2_packages = [
    {
        "path": "../src/fastapi_reverselog",
        "module": "fastapi_reverselog",
    },
]

myst_enable_extensions = [
    "colon_fence",
    "fieldlist",
]

templates_path = ["_templates"]
exclude_patterns = ["_build"]

autodoc2_hidden_objects = ["private", "inherited"]
autodoc2_render_plugin = "myst"

html_theme = "furo"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "fastapi": ("https://fastapi.tiangolo.com", None),
    "httpx": ("https://www.python-httpx.org", None),
    "pydantic": ("https://docs.pydantic.dev/latest", None),
    "sqlalchemy": ("https://docs.sqlalchemy.org/en/20", None),
}

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}
