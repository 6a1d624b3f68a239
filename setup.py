"""setuptools setup for ARISE.

Install for development:
    pip install -e ".[test]"
"""

from setuptools import setup

setup(
    name="ARISE",
    version="0.1.0",
    packages=[
        "arise",
        "arise.database",
        "arise.gamification",
        "arise.timer",
    ],
    python_requires=">=3.10",
    install_requires=[
        "PyQt6",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": ["arise=arise.__main__:main"],
    },
)
