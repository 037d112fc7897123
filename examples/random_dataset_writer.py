# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Random dataset writer for scitensor.

This script builds a dataset of seeded random records and writes every
record to its own HDF5 file, one partition at a time. It is handy for
producing test inputs for downstream pipelines.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Sequence

import scitensor as st

VARIABLE_CHOICES = ("temperature", "pressure", "humidity", "precipitation")


def write_random_dataset(
    output_dir: Path,
    num_files: int,
    partition_size: int = 1,
    var_choices: Sequence[int] = (0, 1, 2, 3),
    shape: Sequence[int] = (20, 20),
    seed: int = 0,
) -> List[Path]:
    """Write ``num_files`` random records to ``output_dir``.

    Parameters
    ----------
    output_dir:
        Directory receiving the files; created when missing.
    num_files:
        Number of records (and files) to produce.
    partition_size:
        Number of sources grouped in each partition.
    var_choices:
        Indices into ``VARIABLE_CHOICES`` selecting the variables every record
        carries. The first selected variable is the one in use.
    shape:
        Shape of every variable.
    seed:
        Seed of the first record; record ``i`` uses ``seed + i``.

    Returns
    -------
    list[pathlib.Path]
        Paths of the written files in partition order.
    """

    names = [VARIABLE_CHOICES[index] for index in var_choices]
    if not names:
        raise ValueError("At least one variable must be selected")

    sources = [
        st.RandomSource(seed=seed + offset, shape=tuple(shape), variables=tuple(names))
        for offset in range(num_files)
    ]
    dataset = st.SciDataset(sources, names[0], partition_size=partition_size)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for partition in dataset.partitions:
        for position, (source, record) in enumerate(
            zip(partition.sources, dataset.compute(partition))
        ):
            # Attach the remaining variables of the same source to the record.
            with dataset.loader.open(source) as handle:
                for name in names[1:]:
                    record.insert_variable(name, dataset.loader.extract_variable(handle, name))
            record.insert_metadata(("seed", source.seed), ("partition", partition.index))
            target = output_dir / f"random_{partition.index:05d}_{position:05d}.h5"
            written.append(record.serialize(target))
    return written


def main():  # pragma: no cover - example script
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("output_dir", type=Path, help="Directory for the generated files")
    parser.add_argument("num_files", type=int, help="Number of files to generate")
    parser.add_argument("partitions", type=int, help="Number of sources per partition")
    parser.add_argument(
        "--variables",
        default="0,1,2,3",
        help="Comma separated indices into " + ", ".join(VARIABLE_CHOICES),
    )
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    st.setup_logging(logging.INFO)
    var_choices = [int(choice) for choice in args.variables.split(",")]
    written = write_random_dataset(
        args.output_dir,
        args.num_files,
        partition_size=args.partitions,
        var_choices=var_choices,
        seed=args.seed,
    )
    print(f"Wrote {len(written)} files to {args.output_dir}")


if __name__ == "__main__":  # pragma: no cover - example script
    main()
