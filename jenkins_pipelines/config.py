#!/usr/bin/env python
# Copyright 2024 The jenkins-pipeline-codec Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

# Manage codec configuration sources, defaults, and access.

import configparser
import io
import logging
import os

from jenkins_pipelines.errors import PipelineCodecConfigException

__all__ = [
    "CodecConfig"
]

logger = logging.getLogger(__name__)

DEFAULT_CONF = """
[codec]
# number of spaces used to indent generated config.xml documents
indent=2
# refuse to decode multibranch sources with an unknown class attribute
strict_sources=True
"""


class CodecConfig(object):

    def __init__(self, config_filename=None, config_section='codec'):
        """
        The CodecConfig class resolves the options used when rendering and
        parsing Jenkins job documents. Defaults come from DEFAULT_CONF and
        may be overridden by an INI file.

        :arg str config_filename: Name of a configuration file overriding the
            defaults. When given, the file must exist.
        :arg str config_section: Section holding the codec options.
        """

        config_parser = self._init_defaults()

        if config_filename is not None:
            with self._read_config_file(config_filename) as config_fp:
                config_parser.read_file(config_fp)

        self.config_parser = config_parser
        self._section = config_section

        self.indent = 2
        self.strict_sources = True

        self._setup()

    def _init_defaults(self):
        """ Initialize default configuration values using DEFAULT_CONF
        """
        config = configparser.ConfigParser()
        # Load default config always
        config.read_string(DEFAULT_CONF)
        return config

    def _read_config_file(self, config_filename):
        """ Given path to configuration file, open it for reading and return
        the file object.
        """
        if os.path.isfile(config_filename):
            logger.debug("Reading config from {0}".format(config_filename))
            config_fp = io.open(config_filename, 'r', encoding='utf-8')
        else:
            raise PipelineCodecConfigException(
                "A valid configuration file is required. "
                "\n{0} is not valid.".format(config_filename))

        return config_fp

    def _setup(self):
        config = self.config_parser

        if not config.has_section(self._section):
            logger.warning("No [{0}] section in the configuration, using "
                           "default values.".format(self._section))
            return

        try:
            indent = config.getint(self._section, 'indent')
        except ValueError:
            raise PipelineCodecConfigException(
                "Codec indent config is invalid")
        except configparser.NoOptionError:
            indent = 2
        if indent < 0:
            raise PipelineCodecConfigException(
                "Codec indent must not be negative, got {0}".format(indent))
        self.indent = indent

        try:
            self.strict_sources = config.getboolean(
                self._section, 'strict_sources')
        except ValueError:
            raise PipelineCodecConfigException(
                "Codec strict_sources config is invalid")
        except configparser.NoOptionError:
            self.strict_sources = True

        logger.debug("Config: indent={0} strict_sources={1}".format(
            self.indent, self.strict_sources))
