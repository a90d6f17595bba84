#!/usr/bin/env python3

"""
Setup module for unattend
"""

import os

from setuptools import find_namespace_packages, setup

VERSION = "1.0.0"


def read_readme_file() -> str:
    """
    read the contents of your README file
    """
    this_directory = os.path.abspath(os.path.dirname(__file__))
    with open(os.path.join(this_directory, "README.md"), encoding="utf-8") as f:
        return f.read()


#####################################################################
## Actual Setup.py Script ###########################################
#####################################################################


if __name__ == "__main__":
    setup(
        name="unattend",
        version=VERSION,
        description="Windows answer file builder for unattended deployments",
        long_description=read_readme_file(),
        long_description_content_type="text/markdown",
        license="GPLv2+",
        classifiers=[
            "Development Status :: 4 - Beta",
            "License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)",
            "Programming Language :: Python :: 3",
            "Topic :: System :: Installation/Setup",
            "Topic :: System :: Systems Administration",
            "Intended Audience :: System Administrators",
            "Natural Language :: English",
        ],
        keywords=["unattend", "autounattend", "answerfile", "provisioning"],
        python_requires=">=3.8",
        install_requires=[
            "lxml",
            "pyyaml",
            "schema",
            "Cheetah3",
        ],
        extras_require={
            "lint": [
                "pyflakes",
                "pycodestyle",
                "pylint",
                "black",
                "types-PyYAML",
                "lxml-stubs",
                "types-setuptools",
                "isort",
            ],
            "test": [
                "pytest>6",
                "pytest-cov",
                "coverage",
                "pytest-mock>3.3.0",
            ],
        },
        packages=find_namespace_packages(include=["unattend", "unattend.*"]),
        include_package_data=True,
        data_files=[
            ("share/unattend/config", ["config/settings.yaml", "config/logging_config.conf"]),
        ],
        entry_points={
            "console_scripts": [
                "unattend = unattend.cli:main",
            ]
        },
    )
