"""
configuration: (decreasing scope, increasing priority)
  1) system level:  $PREFIX/etc/envgrep.{yaml,yml,json,ini,conf}
  2) user level:    ~/.envgrep.{yaml,yml,json,ini,conf}
  3) environment:   $ENVGREP_X
  4) explicit file: --config FILE
  5) cli:           --x
"""
import configparser
import json
import logging
from glob import glob
from os import environ

import yaml

from .errors import BadConfig

log = logging.getLogger(__name__)

TRUE_STRINGS = frozenset(('true', 'yes', 'on', '1'))
FALSE_STRINGS = frozenset(('false', 'no', 'off', '0', ''))


class UnrecognizedConfig(ValueError):
    pass


class AmbiguousConfig(BadConfig):
    pass


class Config:

    def __init__(self, projectname):
        self.projectname = projectname

    def from_file(self, filename):
        try:
            if filename.endswith(('.conf', '.ini')):
                parser = configparser.ConfigParser()
                parser.read(filename)
                if not parser.has_section(self.projectname):
                    return {}
                return dict(parser.items(self.projectname))
            elif filename.endswith(('.yaml', '.yml')):
                with open(filename) as f:
                    return yaml.load(f, Loader=getattr(yaml, 'CSafeLoader', yaml.SafeLoader)) or {}
            elif filename.endswith('.json'):
                with open(filename) as f:
                    return json.load(f)
        except (OSError, configparser.Error, yaml.YAMLError, ValueError) as error:
            raise BadConfig('could not read config file %s: %s' % (filename, error))
        raise UnrecognizedConfig('Unknown config type: %s' % filename)

    def from_glob(self, pattern):
        results = []
        for fname in sorted(glob(pattern)):
            try:
                config = self.from_file(fname)
            except UnrecognizedConfig:
                continue
            else:
                log.debug('loaded config from %s', fname)
                results.append(config)

        if len(results) == 1:
            return results[0]
        elif len(results) > 1:
            raise AmbiguousConfig('multiple configurations found at %s' % pattern)

    def from_path_prefix(self, pattern_prefix):
        pattern = ''.join((pattern_prefix, self.projectname, '.*'))
        return self.from_glob(pattern)

    def _globals_disabled(self):
        return environ.get(self.projectname.upper() + '_NO_GLOBAL_CONFIG') == 'true'

    def from_system(self):
        if self._globals_disabled():
            return {}
        return self.from_path_prefix(environ.get('PREFIX', '') + '/etc/')

    def from_homedir(self):
        if self._globals_disabled():
            return {}
        home = environ.get('HOME', '$HOME')
        return self.from_path_prefix(home + '/.')

    def from_environ(self, env=None):
        if env is None:
            env = environ

        var_prefix = self.projectname.upper() + '_'
        config = {}
        for varname, value in env.items():
            if varname.startswith(var_prefix):
                varname = varname.replace(var_prefix, '', 1).lower()
                config[varname] = value
        return config

    def from_cli(self, args):
        configs = []
        if getattr(args, 'config', None) is not None:
            configs.append(self.from_file(args.config))
        configs.append({
            key: value
            for key, value in vars(args).items()
            if key != 'config'
        })
        return merge(configs)

    def combined(self, defaults=(), args=None):
        layers = [defaults, self.from_system(), self.from_homedir(), self.from_environ()]
        if args is not None:
            layers.append(self.from_cli(args))
        return merge(layers)


def merge(values):
    """later values win; None is an empty layer"""
    result = {}
    for value in values:
        if value is None:
            continue
        result.update(value)
    return result


def as_bool(key, value):
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    elif lowered in FALSE_STRINGS:
        return False
    else:
        raise BadConfig('%s: expected a boolean, got %r' % (key, value))


def as_int(key, value):
    if isinstance(value, bool):
        raise BadConfig('%s: expected a number, got %r' % (key, value))
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise BadConfig('%s: expected a number, got %r' % (key, value))
    if result < 0:
        raise BadConfig('%s: must not be negative, got %r' % (key, value))
    return result


def coerce(config, types):
    """Values from ini files and the environment arrive as strings; give them their real types."""
    result = dict(config)
    for key, kind in types.items():
        if key in result:
            result[key] = kind(key, result[key])
    return result
