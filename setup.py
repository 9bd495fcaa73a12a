# Usage: python setup.py bdist_wheel

import setuptools  # type: ignore

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='proprewrite',
    version='0.1.0',
    author="The proprewrite developers",
    description="Pattern matching and rewriting of propositional formulas",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(
        exclude=['tests', 'tests.*']
    ),
    python_requires='>=3.11',
    install_requires=[
        'pyeda',
        'typing_extensions',
        'IPython'
    ],
    extras_require={
        'test': ['pytest']
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD-2-Clause",
        "Operating System :: OS Independent",
    ],
)
