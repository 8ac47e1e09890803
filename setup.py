from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="PMFinal",
    version="0.1.0",
    packages=find_packages(exclude=["Examples"]),
    install_requires=[
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "numba>=0.54.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    author="Hyunseung Kong",
    author_email="hskong@snu.ac.kr",
    description="Final cycle population and posterior summaries for NPAG and IT2B runs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
    python_requires=">=3.8",
    keywords="pharmacometrics, population pharmacokinetics, NPAG, IT2B, shrinkage",
)
