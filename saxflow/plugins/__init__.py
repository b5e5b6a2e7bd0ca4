# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Tokenizers and source loaders are registered with the ``plugin_manager``.  Modules
that are registered as entrypoint in the ``saxflow`` group are imported when
``saxflow`` is.
"""

from _saxflow.plugins import plugin_manager, TokenizerInterface


__all__ = ("plugin_manager", TokenizerInterface.__name__)
