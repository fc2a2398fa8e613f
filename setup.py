from setuptools import setup, find_packages

setup(
    name="mimodet",
    version="1.0.0",
    description="Data detection algorithms and error-rate simulation for massive MU-MIMO",
    packages=find_packages(include=["mimodet", "mimodet.*"]),
    install_requires=[
        "numpy",
        "torch",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'mimodet=mimodet.__main__:main',
        ],
    },
)
