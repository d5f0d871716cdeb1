from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()


setup(
    name="nft-surface",
    packages=find_packages("src"),
    package_dir={"": "src"},
    version="1.0.0",
    description="Fully asynchronous storefront client for lazy-minted NFTsurface collections",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    python_requires=">=3.9",
    install_requires=[
        "aiohttp",
        "loguru",
        "pydantic>=2",
        "web3>=7",
        "eth-account>=0.13",
        "eth-keys",
        "eth-utils",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio>=0.21"],
    },
)
