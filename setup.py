"""Setup script for Dynamic Site RAG package."""
from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="dynamic-site-rag",
    version="0.1.0",
    author="Dynamic Site RAG Contributors",
    description="Crawl JavaScript-rendered websites and SPAs into a hybrid BM25 + semantic knowledge base",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "langchain-core>=0.1.0",
        "pydantic>=2.0.0",
        "beautifulsoup4>=4.12.0",
        "tqdm>=4.66.0",
        "playwright>=1.40.0",
        "tiktoken>=0.5.0",
        "rank-bm25>=0.2.2",
        "numpy>=1.24.0",
        "torch>=2.0.0",
        "sentence-transformers>=2.2.0",
        "langchain-huggingface>=0.0.3",
    ],
    extras_require={
        "dev": ["pytest", "pytest-asyncio", "black", "flake8"],
    },
    entry_points={
        "console_scripts": [
            "dynamic-site-rag=dynamic_site_rag.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="rag crawler playwright spa bm25 embeddings llm",
)
