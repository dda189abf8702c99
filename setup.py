from setuptools import setup, find_packages

setup(
    name="vs-tool",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "click>=8.0.0",
        "rich>=13.0.0",
        "pyyaml>=5.4",
        "httpx>=0.24.0",
        "kubernetes>=26.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "vs-tool=vs_tool.cli:main",
        ],
    },
    python_requires=">=3.9",
)
