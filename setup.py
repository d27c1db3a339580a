from setuptools import setup, find_packages

setup(
    name="structural-edit",
    version="0.1.0",
    packages=find_packages(exclude=["tests*"]),
    install_requires=[
        "pyyaml",
        # JS/TS/JSX parsing
        "tree-sitter>=0.22",
        "tree-sitter-typescript",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "structural-edit=structural_edit.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Format-preserving structural edits for JavaScript, TypeScript and JSX files.",
)
