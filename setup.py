from pathlib import Path

from setuptools import find_packages, setup  # isort: skip


HERE = Path(__file__).resolve().parent


def get_version():
    # type: () -> str
    namespace = {}  # type: dict
    exec((HERE / "ddsampling" / "_version.py").read_text(), namespace)
    return namespace["version"]


setup(
    name="ddsampling",
    version=get_version(),
    description="Priority sampling decisions for distributed traces",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "ddsampling": ["py.typed"],
    },
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=[
        "attrs>=20",
        "envier~=0.6.1",
    ],
    extras_require={
        "test": [
            "hypothesis",
            "mock",
            "pytest",
        ],
    },
)
