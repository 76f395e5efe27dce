from setuptools import setup, find_packages

setup(
    name="webauto",
    version="1.0.0",
    packages=find_packages(include=["webauto", "webauto.*"]),
    install_requires=[
        "playwright>=1.40",
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    package_data={
        "webauto": ["schemas/*.json"],
    },
    entry_points={
        "console_scripts": [
            "webauto=webauto.cli:main",
        ],
    },
)
