from setuptools import setup, find_packages

setup(
    name="survgrad",
    version="0.1.0",
    description="SurvGrad: gradient-based attribution curves for neural survival models",
    packages=find_packages(exclude=["tests*", "scripts*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "numpy","PyYAML","torch>=2.0.0","tqdm"
    ],
    extras_require={"test": ["pytest"]},
)
