#!/usr/bin/env python3
import contextlib
import operator
import sys
import time
from typing import Iterable, Iterator, List, Optional, Tuple

import click

from iterbuf.buffer import rewrite
from iterbuf.itertools import equivalence_classes

RewriteRule = Tuple[List[str], List[str]]


def parse_rules(
    ctx: click.Context, param: Optional[click.Parameter], values: Tuple[str, ...]
) -> List[RewriteRule]:
    rules = []
    for value in values:
        pattern, separator, replacement = value.partition('=')
        if not separator:
            raise click.BadParameter(f'Expected PATTERN=REPLACEMENT, got {value!r}')
        if not pattern.split():
            raise click.BadParameter(f'Empty pattern in {value!r}')
        rules.append((pattern.split(), replacement.split()))
    return rules


def tokenize(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        yield from line.split()


@click.command()
@click.argument('source', nargs=1, type=click.Path(exists=True, allow_dash=True))
@click.option('-r', '--rule', 'rules', multiple=True, callback=parse_rules, metavar='PATTERN=REPLACEMENT')
@click.option('-g', '--group', is_flag=True)
@click.option('-o', '--output', default='-')
@click.option('-v', '--verbose', count=True)
def main(source: str, rules: List[RewriteRule], group: bool, output: str, verbose: int) -> None:
    timer = timing if verbose >= 1 else dummy_timing

    with timer('Rewriting'):
        with click.open_file(source) as f:
            tokens = list(rewrite(tokenize(f), rules))

    if group:
        with timer('Grouping'):
            lines = [' '.join(run) for run in equivalence_classes(tokens, operator.eq)]
    else:
        lines = tokens

    with timer('Writing to storage'):
        with click.open_file(output, 'w') as f2:
            for line in lines:
                f2.write(line + '\n')


@contextlib.contextmanager
def timing(description: str) -> Iterator[None]:
    t0 = time.time()
    yield
    t1 = time.time()
    dt = (t1 - t0) * 1000
    print(f'[timer] {description} took {dt:4f} ms', file=sys.stderr)


@contextlib.contextmanager
def dummy_timing(description: str) -> Iterator[None]:
    yield


if __name__ == '__main__':
    main()
