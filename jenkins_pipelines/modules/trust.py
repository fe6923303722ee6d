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

"""
Trust levels for pull requests discovered from forks.

Each SCM plugin names its trust policies differently, and the names end up
as the ``$``-suffix of the ``trust`` element class, e.g.
``ForkPullRequestDiscoveryTrait$TrustContributors``.
Pipelines store the numeric value, the tables below translate between both.
"""

import collections


class TrustTable(object):
    """Bidirectional table between trust values and trust class suffixes.

    :arg list entries: ``(value, name)`` pairs
    :arg fallback: ``(value, name)`` used for unknown names and values, or
        None to report them as invalid
    """

    def __init__(self, entries, fallback=None):
        self.names = collections.OrderedDict(entries)
        self.values = dict((name, value) for value, name in entries)
        self.fallback = fallback

    def to_string(self, value):
        if value in self.names:
            return self.names[value]
        if self.fallback is not None:
            return self.fallback[1]
        return ''

    def from_string(self, name):
        """Return ``(value, valid)`` for a trust class suffix."""
        if name in self.values:
            return self.values[name], True
        if self.fallback is not None:
            return self.fallback[0], True
        return -1, False

    def is_valid(self, value):
        return value in self.names


# GitLab merge requests
PR_DISCOVER_TRUST = TrustTable([
    (1, 'TrustMembers'),
    (2, 'TrustEveryone'),
    (3, 'TrustPermission'),
    (4, 'TrustNobody'),
])

GITHUB_PR_DISCOVER_TRUST = TrustTable([
    (1, 'TrustContributors'),
    (2, 'TrustEveryone'),
    (3, 'TrustPermission'),
    (4, 'TrustNobody'),
])

# unknown Bitbucket names resolve to TrustEveryone
BITBUCKET_PR_DISCOVER_TRUST = TrustTable([
    (1, 'TrustEveryone'),
    (2, 'TrustTeamForks'),
    (3, 'TrustNobody'),
], fallback=(1, 'TrustEveryone'))
