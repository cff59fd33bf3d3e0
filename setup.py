#!/usr/bin/env python
import re

from setuptools import find_packages, setup

# mangasync/__init__.py imports the Celery app, so the version tuple is read
# from the source instead of importing the package
with open("mangasync/__init__.py", "r") as f:
    VERSION_TUPLE = re.search(r"^VERSION = \((.*)\)$", f.read(), re.M)[1]
VERSION = ".".join(part.strip() for part in VERSION_TUPLE.split(","))

INSTALL_REQUIREMENTS = [
    "beautifulsoup4",
    "celery",
    "Django>=4.2",
    "Pillow",
    "psycopg2-binary",
    "requests",
    "sentry-sdk",
    "setuptools_scm",
    "structlog",
]
TEST_REQUIREMENTS = ["pytest", "pytest-django"]
SCRIPTS = ["manage.py"]
DESCRIPTION = "Manga chapter ingestion pipeline"
CLASSIFIERS = """\
Environment :: Console
Framework :: Django
Programming Language :: Python
Programming Language :: Python :: 3
""".splitlines()

with open("README.md", "r") as f:
    LONG_DESCRIPTION = f.read()


setup(
    name="mangasync",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    include_package_data=True,
    scripts=SCRIPTS,
    install_requires=INSTALL_REQUIREMENTS,
    extras_require={"tests": TEST_REQUIREMENTS},
    classifiers=CLASSIFIERS,
    use_scm_version={
        "write_to": "version.txt",
        "tag_regex": r"^(?P<prefix>v)?(?P<version>[^\+]+)(?P<suffix>.*)?$",
        "fallback_version": VERSION,
    },
    setup_requires=["setuptools_scm"],
)
