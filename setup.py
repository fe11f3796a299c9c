# This should be only one line. If it must be multi-line, indent the second
# line onwards to keep the PKG-INFO file format intact.
"""Create, update, encrypt, decrypt and rotate PGP-encrypted values in \
Salt pillar files.
"""

from setuptools import find_packages, setup

version = open("src/securepillar/version.txt").read().strip()

setup(
    name="securepillar",
    version=version,
    install_requires=[
        "py",
        "pyyaml", ],
    extras_require={
        "test": [
            "mock",
            "pytest",
            "pytest-coverage",
            "pytest-instafail",
            "pytest-timeout", ]},
    entry_points="""
        [console_scripts]
            securepillar = securepillar.main:main
    """,
    license="BSD (2-clause)",
    keywords="salt pillar gpg secrets",
    classifiers="""\
License :: OSI Approved :: BSD License
Programming Language :: Python
Programming Language :: Python :: 3
Programming Language :: Python :: 3 :: Only
"""[:-1].split("\n"),
    description=__doc__.strip(),
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    package_data={"securepillar": ["version.txt"]},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.7")
