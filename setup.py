#!/usr/bin/env python

from setuptools import find_packages, setup

# Read the contents of the README file
with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

dependencies = [
    "fastapi>=0.110",
    "pydantic>=2.5",
    "prometheus-client>=0.17",
    "pyyaml>=6.0",
    "uvicorn>=0.27",
]

test_dependencies = [
    "pytest>=8.0",
    "httpx>=0.27",
]

setup(
    name="micro_kit",
    version="0.1.0",
    description="Configuration, logging, health checking and metrics for small Python services.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="micro_kit Contributors",
    author_email="",
    packages=find_packages(include=["micro_kit", "micro_kit.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=dependencies,
    extras_require={"test": test_dependencies},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Monitoring",
    ],
)
