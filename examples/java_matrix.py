"""Build the Java matrix in code and derive per-job JVM arguments.

Run from a CI step:
    MATRIX_JOBS=5 python examples/java_matrix.py
"""

from __future__ import annotations

import logging
import sys

from cimatrix import MatrixBuilder, sort_rows
from cimatrix.cli.output import emit_github
from cimatrix.config import load_settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def build() -> MatrixBuilder:
    matrix = MatrixBuilder(seed=load_settings().seed)

    matrix.add_axis("java_distribution", ["zulu", "temurin", "liberica", "microsoft"])
    matrix.add_axis("jit", ["hotspot"], title="")
    matrix.add_axis("java_version", ["8", "11", "17"], title=lambda x: "Java " + x)
    matrix.add_axis("tz", ["America/New_York", "Pacific/Chatham", "UTC"])
    matrix.add_axis(
        "os",
        ["ubuntu-latest", "windows-latest", "macos-latest"],
        title=lambda x: x.replace("-latest", ""),
    )
    matrix.add_axis(
        "hash",
        [
            {"value": "regular", "title": "", "weight": 42},
            {"value": "same", "title": "same hashcode", "weight": 1},
        ],
    )
    matrix.add_axis(
        "locale",
        [
            {"language": "de", "country": "DE"},
            {"language": "fr", "country": "FR"},
            {"language": "ru", "country": "RU"},
            {"language": "tr", "country": "TR"},
        ],
        title=lambda x: x["language"] + "_" + x["country"],
    )

    matrix.set_name_pattern(["java_version", "java_distribution", "hash", "os", "tz", "locale"])

    matrix.exclude({"java_distribution": "microsoft", "java_version": "8"})
    # OpenJ9 ignores -XX:hashCode=2
    matrix.exclude({"hash": {"value": "same"}, "jdk": {"distribution": "adopt-openj9"}})

    matrix.generate_row({"hash": {"value": "same"}})
    matrix.generate_row({"os": "windows-latest"})
    matrix.generate_row({"os": "ubuntu-latest"})
    java_versions = matrix.axis_by_name["java_version"].raw_values
    matrix.generate_row({"java_version": java_versions[0]})
    matrix.generate_row({"java_version": java_versions[-1]})
    return matrix


def jvm_args(job: dict) -> str:
    args = []
    if job["hash"]["value"] == "same":
        args += ["-XX:+UnlockExperimentalVMOptions", "-XX:hashCode=2"]
    # Pass the locale to tests only, the build tool itself breaks under tr_TR
    args.append(f"-Duser.country={job['locale']['country']}")
    args.append(f"-Duser.language={job['locale']['language']}")
    return " ".join(args)


def main() -> int:
    settings = load_settings()
    rows = sort_rows(build().generate_rows(settings.jobs))

    include = []
    for row in rows:
        job = row.to_dict()
        job["testExtraJvmArgs"] = jvm_args(job)
        del job["hash"]
        include.append(job)

    for job in include:
        print(job["name"], file=sys.stderr)
    emit_github(include, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
