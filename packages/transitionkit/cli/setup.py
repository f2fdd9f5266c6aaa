from setuptools import find_namespace_packages, setup

packages = find_namespace_packages(where="../..", include=["transitionkit.cli", "transitionkit.cli.*"])

setup(
    name="transitionkit-cli",
    packages=packages,
    package_dir={"": "../.."},
    install_requires=["transitionkit-core", "rich"],
    entry_points={"console_scripts": ["transitionkit = transitionkit.cli.main:main"]},
)
