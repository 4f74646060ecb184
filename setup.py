from setuptools import setup, find_packages

setup(
    name="rpgdoc",
    version="1.0.0",
    description="Documentation generator for legacy fixed-form RPG programs",
    author="Kalmantic Applied AI Lab",
    license="MIT",
    packages=find_packages(include=["rpgdoc", "rpgdoc.*"]),
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rpgdoc=rpgdoc.cli:main",
        ],
    },
    python_requires=">=3.8",
)
