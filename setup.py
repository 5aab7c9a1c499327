from setuptools import find_packages, setup

setup(
    name="odecompare",
    description="Interactive comparison of Euler, RK4 and adaptive ODE solvers",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "sympy",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
)
