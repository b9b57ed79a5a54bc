from setuptools import find_packages, setup

setup(
    name="layer-search",
    version="0.1.0",
    description="Layer Search - comparator layer enumeration and chain search",
    packages=find_packages(exclude=["test", "test.*"]),
    python_requires=">=3.10",
    install_requires=["numpy", "networkx", "tabulate", "tqdm"],
    extras_require={"test": ["pytest"]},
)
