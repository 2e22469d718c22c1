import os

from setuptools import find_packages, setup  # isort: skip


HERE = os.path.dirname(os.path.abspath(__file__))


def get_version():
    version = {}
    with open(os.path.join(HERE, "coverband_service", "_version.py")) as f:
        exec(f.read(), version)
    return version["__version__"]


setup(
    name="coverband-service-client",
    version=get_version(),
    description="Delta reporting client for the Coverband coverage service",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "coverband_service": ["py.typed"],
    },
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=[
        "attrs>=20",
        "envier~=0.6",
        "wrapt>=1",
        "datadog>=0.44",
    ],
    extras_require={
        "test": [
            "mock",
            "pytest",
            "riot",
        ],
    },
)
