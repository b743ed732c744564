"""Setup script for ytpoll."""

from pathlib import Path

from setuptools import find_packages, setup

with Path("README.md").open() as file:
    long_description = file.read()

setup(
    name="ytpoll",
    version="1.0.0",
    packages=find_packages(include=["ytpoll", "ytpoll.*"]),
    author="SeoulSKY",
    author_email="contact@seoulsky.dev",
    description="Easy-to-use Python library for polling YouTube channels and "
    "getting notified once for every new video",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=[
        "httpx~=0.28.1",
        "xmltodict~=0.14.2",
        "python-dotenv~=1.0.1",
        "typing_extensions>=4.4.0; python_version < '3.12'",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.24",
            "respx~=0.22.0",
        ],
    },
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
