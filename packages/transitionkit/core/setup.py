from setuptools import find_namespace_packages, setup

# Namespace layout: transitionkit/ and transitionkit/core/ carry no __init__.py
packages = find_namespace_packages(
    where="../..", include=["transitionkit.core", "transitionkit.core.*"]
)

setup(
    name="transitionkit-core",
    packages=packages,
    package_dir={"": "../.."},
    install_requires=["numpy", "pydantic>=2", "PyYAML"],
)
