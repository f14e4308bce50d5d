"""
Setup script for the Gizmo Installer.
"""

from __future__ import annotations

from pathlib import Path
import sys

from setuptools import find_packages, setup

ROOT = Path(__file__).resolve().parent
README = ROOT / "README.md"

long_description = ""
if README.exists():
    long_description = README.read_text(encoding="utf-8")

is_linux = sys.platform.startswith("linux")

if len(sys.argv) == 1:
    print("No command supplied; defaulting to `install`.")
    sys.argv.append("install")

setup(
    name="gizmo-installer",
    version="1.0.0",
    description="Software installer for the BEST Robotics Gizmo platform",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Gizmo Platform Team",
    license="MIT",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"gizmo_installer": ["resources/*"]},
    python_requires=">=3.11",
    install_requires=[
        "PySide6>=6.6.0",
        "pydantic>=2.5.0",
        "structlog>=24.1.0",
        "requests>=2.31.0",
        "click>=8.1.0",
        "rich>=13.7.0",
        "psutil>=5.9.0",
        "humanize>=4.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
            "ruff>=0.2.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gizmo-installer-cli=gizmo_installer.cli.main:main",
        ],
        "gui_scripts": [
            "gizmo-installer=gizmo_installer.ui.main:main",
        ],
    },
    data_files=(
        [
            (
                "share/applications",
                ["src/gizmo_installer/resources/gizmo-installer.desktop"],
            ),
        ]
        if is_linux
        else []
    ),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: Qt",
        "Environment :: Win32 (MS Windows)",
        "Intended Audience :: Education",
        "Operating System :: Microsoft :: Windows :: Windows 11",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Installation/Setup",
    ],
)
