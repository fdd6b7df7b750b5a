# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import copy
import logging
import sys

import termcolor


_level_colours = {
    logging.DEBUG: 'blue',
    logging.INFO: 'green',
    logging.WARNING: 'yellow',
    logging.ERROR: 'red',
    logging.CRITICAL: 'red',
}

# loggers of third-party libraries which are too chatty on INFO
_noisy_loggers = (
    'git',
    'github3',
    'urllib3',
)


class ReleaseNotesFormatter(logging.Formatter):
    '''
    exposes `levelprefix` to format strings: the record's level name, coloured if (and only if)
    output is written to a tty
    '''
    def __init__(self, *args, stream=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.stream = stream or sys.stderr

    def levelprefix(self, record: logging.LogRecord) -> str:
        if not self.stream.isatty():
            return record.levelname

        if not (colour := _level_colours.get(record.levelno)):
            return record.levelname

        return termcolor.colored(record.levelname, colour, attrs=['bold'])

    def formatMessage(self, record):
        record = copy.copy(record)
        record.levelprefix = self.levelprefix(record)
        return super().formatMessage(record)


def default_fmt_string(print_thread_id: bool=False):
    tid = 'TID:%(thread)d ' if print_thread_id else ''
    return f'%(asctime)s [%(levelprefix)s] {tid}%(name)s: %(message)s'


def configure_default_logging(
    stdout_level=None,
    force=True,
    print_thread_id=False,
    stream=None,
):
    if not stdout_level:
        stdout_level = logging.INFO

    # make sure to have a clean root logger (in case setup is called multiple times)
    if force:
        for handler in tuple(logging.root.handlers):
            logging.root.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream)
    handler.setLevel(stdout_level)
    handler.setFormatter(ReleaseNotesFormatter(
        fmt=default_fmt_string(print_thread_id=print_thread_id),
        stream=handler.stream,
    ))

    logging.root.addHandler(hdlr=handler)
    logging.root.setLevel(level=stdout_level)

    for name in _noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
