import re

from setuptools import setup

with open("zcashsigner/__init__.py") as init_file:
    __version__ = re.search(r'__version__ = "([^"]+)"', init_file.read()).group(1)

with open("README.rst") as readme:
    long_description = readme.read()

setup(
    name="zcash-signer",
    version=__version__,
    description="Offline signer for transparent Overwinter/Sapling transactions",
    long_description=long_description,
    author="The zcash-signer developers",
    license="MIT",
    keywords="zcash verus sapling overwinter transaction signing library",
    python_requires=">=3.9",
    install_requires=[
        "base58check>=1.0.2,<2.0",
        "ecdsa>=0.18",
        "sympy>=1.2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    packages=["zcashsigner"],
    entry_points={
        "console_scripts": ["zcash-signer=zcashsigner.cli:main"],
    },
    zip_safe=False,
)
