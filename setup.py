"""Setup configuration for GyanSathi - Bengali knowledge assistant"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="gyansathi",
    version="0.1.0",
    author="Md. Abid Hasan Rafi",
    author_email="contact@abidhasanrafi.com",
    description="GyanSathi - rule-based Bengali question answering over your own knowledge",
    long_description=long_description,
    long_description_content_type="text/markdown",
    project_urls={
        "Developer": "https://abidhasanrafi.github.io/",
    },
    packages=find_packages(exclude=("tests", "tests.*")),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Natural Language :: Bengali",
    ],
    python_requires=">=3.8",
    install_requires=[
        "beautifulsoup4>=4.12.0",
        "requests>=2.31.0",
        "lxml>=4.9.0",
        "numpy>=1.24.0",
        "rapidfuzz>=3.0.0",
        "colorama>=0.4.6",
        "tqdm>=4.66.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gyansathi=gyansathi.cli:main",
        ],
    },
)
