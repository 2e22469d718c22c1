# type: ignore
from typing import List  # noqa
from typing import Tuple  # noqa

from riot import Venv


latest = ""


SUPPORTED_PYTHON_VERSIONS: List[Tuple[int, int]] = [
    (3, 8),
    (3, 9),
    (3, 10),
    (3, 11),
    (3, 12),
    (3, 13),
]


def version_to_str(version: Tuple[int, int]) -> str:
    """Convert a Python version tuple to a string

    >>> version_to_str((3, 8))
    '3.8'
    """
    return ".".join(str(p) for p in version)


venv = Venv(
    pkgs={
        "mock": latest,
        "pytest": latest,
    },
    env={
        "COVERBAND_LOGGING_RATE": "0",
    },
    venvs=[
        Venv(
            name="client",
            command="pytest -v {cmdargs} tests/",
            pys=[version_to_str(v) for v in SUPPORTED_PYTHON_VERSIONS],
        ),
        Venv(
            name="client-legacy-attrs",
            command="pytest -v {cmdargs} tests/",
            pys=version_to_str(min(SUPPORTED_PYTHON_VERSIONS)),
            pkgs={"attrs": "==20.1.0"},
        ),
    ],
)
