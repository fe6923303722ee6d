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

# Base class for a jenkins_pipelines project module

from jenkins_pipelines.config import CodecConfig
from jenkins_pipelines.errors import MissingElementError


class Base(object):
    """
    A base class for a project module, translating one kind of pipeline
    model to and from the ``config.xml`` document of the matching Jenkins
    project class.

    :arg CodecConfig config: codec options, defaults when omitted
    """

    #: The root tag of the documents handled by the module.
    jenkins_class = None

    #: Message of the error raised for a document with another root tag.
    missing_root_msg = None

    def __init__(self, config=None):
        self.config = config or CodecConfig()

    def root_xml(self):
        """Return the skeleton document of a new project.  The skeleton
        only holds the boilerplate Jenkins needs but never changes, the
        pipeline settings are added by :meth:`update_xml`.

        :rtype: Element
        """

        raise NotImplementedError

    def update_xml(self, root, pipeline):
        """Update the XML element tree in place with the settings of
        ``pipeline``. Elements the module does not know about are left
        untouched, settings absent from ``pipeline`` are removed.

        :arg Element root: the project root element
        :arg pipeline: the pipeline model
        """

        raise NotImplementedError

    def parse_xml(self, root):
        """Build the pipeline model described by the XML element tree.

        :arg Element root: the project root element
        """

        raise NotImplementedError

    def check_root(self, root):
        if root is None or root.tag != self.jenkins_class:
            raise MissingElementError(self.missing_root_msg)
        return root
