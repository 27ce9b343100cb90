#!/usr/bin/env python3
"""
Travel BFF cache subsystem – setup configuration
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Adaptive caching layer for a travel backend-for-frontend.
"""

import re
from pathlib import Path

from setuptools import setup, find_packages

ROOT = Path(__file__).parent
README = ROOT / "README.md"

# Read version from package without importing it
_init = (ROOT / "travel_bff" / "__init__.py").read_text(encoding="utf-8")
_match = re.search(r'^__version__ = "([^"]+)"', _init, re.MULTILINE)
version = _match.group(1) if _match else "0.0.0"

# Read long description
long_description = ""
if README.exists():
    long_description = README.read_text(encoding="utf-8")

# --------------------------------------------------------------------------- #
# Production dependencies
# --------------------------------------------------------------------------- #
INSTALL_REQUIRES = [
    # Framework
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.25.0",
    "pydantic>=2.6.0,<3.0.0",
    "pydantic-settings[toml,yaml]>=2.3.0,<3.0.0",

    # Networking
    "httpx>=0.26.0,<1.0.0",

    # Monitoring
    "prometheus-client>=0.19.0,<1.0.0",

    # Utilities
    "python-dotenv>=1.0.0,<2.0.0",
    "PyYAML>=6.0",
    "rich>=13.6.0",
    "typer>=0.9.0",
    "orjson>=3.9.0,<4.0.0",
]

TEST_REQUIRES = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.21.0",
    "pytest-cov>=4.1.0",
    "httpx>=0.26.0,<1.0.0",
]

# Development dependencies
DEV_REQUIRES = TEST_REQUIRES + [
    # Code Quality
    "ruff>=0.4.0,<1.0.0",
    "mypy>=1.10.0,<2.0.0",
    "types-PyYAML",
]

# --------------------------------------------------------------------------- #
# Setup configuration
# --------------------------------------------------------------------------- #
setup(
    name="travel-bff",
    version=version,
    description="Adaptive caching layer for a travel backend-for-frontend",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package configuration
    packages=find_packages(
        include=["travel_bff", "travel_bff.*"],
        exclude=["tests*", "docs*", "scripts*"]
    ),
    include_package_data=True,
    package_data={
        "travel_bff": ["logging.yaml"],
    },

    # Python version requirement
    python_requires=">=3.11",

    # Dependencies
    install_requires=INSTALL_REQUIRES,
    extras_require={
        "dev": DEV_REQUIRES,
        "test": TEST_REQUIRES,
    },

    # Console scripts
    entry_points={
        "console_scripts": [
            "travel-bff=travel_bff.cli:main",
        ],
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Framework :: Pydantic",
        "Framework :: Pytest",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Topic :: System :: Monitoring",
    ],
    keywords=["cache", "travel", "bff", "supabase", "fastapi", "async"],
    zip_safe=False,
    platforms=["any"],
)
