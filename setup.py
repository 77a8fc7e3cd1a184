from setuptools import find_packages, setup

setup(
    name="beaker-client",
    version="0.1.0",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    license="MIT",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    package_data={"beaker_client": ["py.typed"]},
    install_requires=["pyteal>=0.24.0", "py-algorand-sdk>=2.0.0,<3"],
    extras_require={"test": ["pytest>=7.0"]},
)
