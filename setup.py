from setuptools import find_packages, setup

# GitPython and gitdb need a git executable on PATH at runtime; line diffs are
# rendered by `git diff --no-index`.

package_list = find_packages(
  include=[
    "gitlogue",
    "gitlogue.*",
  ]
)

setup(
  name="gitlogue",
  version="0.1.0",
  description="Commit traversal and diff hunk engine for replaying git history",
  python_requires=">=3.11",
  packages=package_list,
  include_package_data=True,
  install_requires=[
    "GitPython",
    "gitdb",
    "unidiff",
    "pyyaml",
    "pydantic",
    "python-dotenv",
    "platformdirs",
  ],
  extras_require={
    "dev": ["pytest", "pytest-cov"],
  },
  entry_points={
    "console_scripts": [
      "gitlogue-dump=gitlogue.main:main",
    ],
  },
)
