from setuptools import find_packages, setup

setup(
    name="termsense",
    version="0.4.0",
    description="Detect color scheme, color depth, width, hyperlink support "
    "and other capabilities of the terminal",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(include=["termsense", "termsense.*"]),
    install_requires=[
        "typing_extensions>=4.4",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "sybil",
        ],
    },
    entry_points={
        "console_scripts": [
            "termsense-detect = termsense.scripts.detect:main",
        ],
    },
    project_urls={
        "Source": "https://github.com/termsense/termsense",
        "Tracker": "https://github.com/termsense/termsense/issues",
    },
)
