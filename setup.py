# setup.py
from setuptools import setup, find_packages

setup(
    name="secdc",
    version="0.3.0",
    description="S-expression compiler for a SECD-style stack machine",
    packages=find_packages(include=["secdc", "secdc.*", "secdc_lsp"]),
    python_requires=">=3.10",
    install_requires=[
        "pygls>=1.1,<2",
        "lsprotocol>=2023.0.0",
    ],
    extras_require={
        "test": ["pytest>=7", "hypothesis>=6"],
    },
    entry_points={
        "console_scripts": [
            "secdc=secdc.__main__:main",
            "secdc-ls=secdc_lsp.server:main",
        ],
    },
    zip_safe=False,
)
