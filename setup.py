"""Setup configuration for Guildkeeper."""

from setuptools import setup, find_packages

setup(
    name="guildkeeper",
    version="0.0.1",
    description="Authorization, guild configuration and moderation ledger core for a Discord guild manager",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "aiosqlite",
        "PyYAML",
        "prompt_toolkit",
        "python-dotenv",
        "py-cord",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "guildkeeper=guildkeeper.main:main",
        ],
    },
)
