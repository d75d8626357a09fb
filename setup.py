"""Setup script for modshake."""

from setuptools import setup, find_packages

setup(
    name="modshake",
    version="0.1.0",
    description="Module graph builder and symbol-level tree shaker for JavaScript/TypeScript sources",
    author="modshake developers",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "networkx>=3.2.1",
        "pyyaml>=6.0.1",
        "regex>=2023.12.25",
        "click>=8.1.7",
        "rich>=13.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.4",
        ]
    },
    entry_points={
        "console_scripts": [
            "modshake=modshake.cli:cli",
        ]
    },
)
