import pathlib
import re

import setuptools


root_dir = pathlib.Path(__file__).parent

description = "Transport-agnostic WebSocket client connections"

version_module = (root_dir / "src" / "wsbridge" / "version.py").read_text(encoding="utf-8")
version = re.search('tag = version = "(.*)"', version_module).group(1)


setuptools.setup(
    name="wsbridge",
    version=version,
    description=description,
    long_description=description,
    license="BSD-3-Clause",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    package_data={"wsbridge": ["py.typed"]},
    install_requires=[
        # Default transport driver.
        "websockets>=13.0",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
