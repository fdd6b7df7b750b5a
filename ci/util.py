# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import os
import pathlib

import yaml


class Failure(RuntimeError, ValueError):
    pass


def existing_file(path: str | pathlib.Path):
    if isinstance(path, pathlib.Path):
        is_file = path.is_file()
    else:
        is_file = os.path.isfile(path)
    if not is_file:
        raise Failure(f'not an existing file: {path}')
    return path


def existing_dir(path: str | pathlib.Path):
    if isinstance(path, pathlib.Path):
        is_dir = path.is_dir()
    else:
        is_dir = os.path.isdir(path)
    if not is_dir:
        raise Failure(f'not an existing directory: {path}')
    return path


def parse_yaml_file(path, max_elements_count=100000):
    with open(existing_file(path)) as f:
        try:
            parsed = yaml.load(f, Loader=yaml.SafeLoader)
        except yaml.YAMLError as ye:
            raise Failure(f'{path} is not a valid YAML document: {ye}') from ye

    # mitigate yaml bomb
    try:
        _count_elements(parsed, max_elements_count=max_elements_count)
    except ValueError as ve:
        raise Failure(f'{path} contains too many elements: {ve}') from ve

    return parsed


def _count_elements(value, count=0, max_elements_count=100000):
    '''
    recursively counts elements contained in the given value. Before each recursion step,
    the amount of encountered elements is checked against a maximum allowed elements count.
    If said threshold is exceeded, recursion is aborted and a `ValueError` is raised.

    This function is intended to be used as a mitigation against "Billion laughs attack"
    (https://en.wikipedia.org/wiki/Billion_laughs_attack).

    @param value: typically a dict or a list. Other types will yield a count of 1
    '''
    if count > max_elements_count:
        raise ValueError('dict too large')

    if isinstance(value, dict):
        values = value.values()
    elif isinstance(value, list):
        values = value
    else:
        return 1

    leng = 0
    for element in values:
        leng += _count_elements(
            element,
            count=count+leng,
            max_elements_count=max_elements_count,
        )

    return leng
