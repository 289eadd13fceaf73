from pathlib import Path

from setuptools import find_namespace_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [ln.strip() for ln in file.readlines() if ln.strip()]

# Define our package
setup(
    name="quizadapt",
    version="0.1",
    description="Adaptive knowledge assessment: ability estimation, question selection and knowledge gaps",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["quizadapt", "quizadapt.*"]),
    package_data={"quizadapt": ["schemas/*.json"]},
    install_requires=required_packages,
    extras_require={
        "test": ["pytest>=7.0"],
        "dev": ["pre-commit==2.19.0", "pytest>=7.0"],
    },
)
