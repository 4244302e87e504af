from setuptools import find_packages, setup

# Paquete del monitor de rendimiento de rotores
setup(
    name="rotor-monitor",
    version="0.1.0",
    description="Runtime performance monitor for vortex-particle rotor simulations",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "matplotlib",
        "polars",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rotor-monitor=rotor_monitor.cli.monitor_case:main",
        ],
    },
)
