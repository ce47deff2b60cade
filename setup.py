from setuptools import setup


setup(
    name="participation-intake",
    version="0.1.0",
    description="Heuristic intake of store participation CSV exports",
    packages=["participation_intake"],
    python_requires=">=3.10",
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "participation-intake=participation_intake.cli:main",
        ]
    },
)
