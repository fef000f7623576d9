from setuptools import setup, find_packages

setup(
    name="sem-metrics",
    version="1.0.0",
    description="Metric terms of curvilinear high-order spectral elements",
    packages=find_packages(include=["sem_metrics", "sem_metrics.*"]),
    package_data={"sem_metrics": ["config/*.json"]},
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "scipy",
        "sympy",
    ],
    extras_require={
        "cuda": ["cupy"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["sem-metrics = sem_metrics.main_metrics:main"],
    },
    zip_safe=False,
)
