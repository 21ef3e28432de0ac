from setuptools import setup, find_packages

setup(
    name="lyric-engine",
    version="0.1.0",
    description="Detect, parse, align, strip and re-serialize synced lyrics (LRC, word-by-word LRC, enhanced LRC, QRC, TTML, ASS)",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "colorama>=0.4.6",
        "regex",
        "typer>=0.9",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "ruff",
            "mypy",
        ]
    },
    entry_points={
        "console_scripts": [
            "lyric-engine=lyric_engine.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing :: Markup :: XML",
    ],
    keywords="lyrics lrc qrc ttml ass karaoke synchronized",
)
