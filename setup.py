from setuptools import setup, find_packages

setup(
    name="spikeODE",
    author="Qiyu Kang",
    author_email="qiyukang@ustc.edu.cn",
    description="ODE-driven spiking membrane models (LIF, ExpIF, AdExpIF, Izhikevich) in PyTorch.",
    url="https://github.com/kangqiyu/spikeDE",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    install_requires=["torch"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.8",
)
