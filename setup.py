from setuptools import setup

setup(
    name="rupture_forecast",
    version="0.1.0",
    packages=["rupture_forecast", "rupture_forecast.scripts"],
    python_requires=">=3.11",
    install_requires=[
        "matplotlib",
        "networkx",
        "numpy",
        "pandas",
        "pyproj",
        "scipy",
        "shapely",
        "typer",
    ],
    extras_require={"test": ["pytest", "hypothesis"]},
    entry_points={
        "console_scripts": [
            "plot-mfd-branches=rupture_forecast.scripts.plot_mfd_branches:main",
        ]
    },
    include_package_data=True,
    zip_safe=False,
)
