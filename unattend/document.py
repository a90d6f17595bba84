"""
Namespace aware access to an answer file.

Every lookup in this module matches on namespace and local name. An element with the right local name but a different
namespace is treated as absent, and a new, correctly namespaced element is created next to it.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
import os
import pathlib
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Union

from lxml import etree

from unattend import enums
from unattend.cexceptions import CX, AnswerFileParseError, SerializationError
from unattend.settings import Settings
from unattend.utils import filesystem_helpers

if TYPE_CHECKING:
    from unattend.layout import MediaLayout

logger = logging.getLogger()

XML_DECLARATION = b'<?xml version="1.0" encoding="utf-8"?>\n'
ROOT_ELEMENT = "unattend"

NamespaceLike = Union[enums.Namespace, str]


def namespace_uri(namespace: NamespaceLike) -> str:
    """
    :param namespace: A member of :class:`~unattend.enums.Namespace` or a namespace URI.
    :return: The namespace URI.
    """
    if isinstance(namespace, enums.Namespace):
        return namespace.value
    return namespace


def qname(local_name: str, namespace: NamespaceLike = enums.Namespace.UNATTEND) -> str:
    """
    Build the Clark notation (``{uri}local``) lxml uses for namespaced names.
    """
    return etree.QName(namespace_uri(namespace), local_name).text


class AnswerDocument:
    """
    Handle to one answer file. Holds the parsed tree and the path every mutation persists to.

    Only one handle per file should be alive at a time: every mutation writes the whole document, so a second handle
    would silently overwrite the changes of the first one.
    """

    def __init__(
        self,
        tree: "etree._ElementTree",
        path: Union[str, os.PathLike],
        settings: Optional[Settings] = None,
    ):
        self.tree = tree
        self.path = pathlib.Path(path)
        self.settings = settings or Settings()

    @staticmethod
    def parser() -> etree.XMLParser:
        """
        Blank text is dropped so pretty printing re-indents the whole tree consistently. Entities are never resolved.
        """
        return etree.XMLParser(
            remove_blank_text=True, resolve_entities=False, no_network=True
        )

    @classmethod
    def new(
        cls, path: Union[str, os.PathLike], settings: Optional[Settings] = None
    ) -> "AnswerDocument":
        """
        Create a document that only consists of the root element and its namespace declarations.

        :param path: Where the document will be saved to.
        :param settings: The settings to use. Defaults are used if omitted.
        """
        document = cls(etree.ElementTree(), path, settings)
        document.ensure_root()
        return document

    @classmethod
    def from_file(
        cls,
        source: Union[str, os.PathLike],
        settings: Optional[Settings] = None,
        path: Optional[Union[str, os.PathLike]] = None,
    ) -> "AnswerDocument":
        """
        Parse an existing answer file.

        :param source: The file to read.
        :param settings: The settings to use. Defaults are used if omitted.
        :param path: Where the document will be saved to. Defaults to ``source``.
        :raises AnswerFileParseError: In case the file cannot be read or is not well-formed XML.
        """
        try:
            tree = etree.parse(str(source), cls.parser())
        except (OSError, etree.XMLSyntaxError) as error:
            raise AnswerFileParseError(
                "Error parsing answer file %s: %s", str(source), str(error)
            ) from error
        document = cls(tree, path or source, settings)
        root = tree.getroot()
        if root is not None and root.tag != qname(ROOT_ELEMENT):
            logger.warning(
                "Root element of %s is %s, expected %s",
                source,
                root.tag,
                qname(ROOT_ELEMENT),
            )
        return document

    @classmethod
    def load(
        cls, layout: "MediaLayout", settings: Optional[Settings] = None
    ) -> "AnswerDocument":
        """
        Load the answer file from the installation media or create a new one if there is none. The returned document
        saves to the output location of the layout, never back to the media.

        A zero length file on the media is treated as if it didn't exist.

        :param layout: The paths of the current provisioning run.
        :param settings: The settings to use. Defaults are used if omitted.
        """
        source = layout.source_answer_file
        try:
            source_size = os.path.getsize(source)
        except FileNotFoundError:
            source_size = 0

        if source_size:
            logger.info("Loading answer file from %s", source)
            return cls.from_file(source, settings, layout.output_answer_file)
        logger.info("No answer file found at %s, creating a new one", source)
        return cls.new(layout.output_answer_file, settings)

    @property
    def extension_namespace(self) -> str:
        return self.settings.extension_namespace

    def _prefix_for(self, uri: str) -> Optional[str]:
        known: Dict[str, str] = {
            enums.Namespace.WCM.value: "wcm",
            enums.Namespace.XSI.value: "xsi",
            self.extension_namespace: self.settings.extension_prefix,
        }
        return known.get(uri)

    @property
    def root(self) -> "etree._Element":
        return self.ensure_root()

    def ensure_root(self) -> "etree._Element":
        """
        Return the root element. It is synthesized with the mandatory namespace declarations if the tree has none.
        """
        root = self.tree.getroot()
        if root is None:
            root = etree.Element(
                qname(ROOT_ELEMENT),
                nsmap={
                    None: enums.Namespace.UNATTEND.value,
                    "wcm": enums.Namespace.WCM.value,
                    self.settings.extension_prefix: self.extension_namespace,
                },
            )
            self.tree._setroot(root)  # pylint: disable=protected-access
        return root

    def find(
        self,
        parent: "etree._Element",
        local_name: str,
        namespace: NamespaceLike = enums.Namespace.UNATTEND,
    ) -> Optional["etree._Element"]:
        """
        Search the direct children of ``parent``.

        :return: The first child matching namespace and local name or None.
        """
        return next(parent.iterchildren(qname(local_name, namespace)), None)

    def create(
        self,
        parent: "etree._Element",
        local_name: str,
        namespace: NamespaceLike = enums.Namespace.UNATTEND,
        attrib: Optional[Dict[str, str]] = None,
    ) -> "etree._Element":
        """
        Unconditionally append a new child. The namespace is declared on the new element with its well-known prefix if
        no ancestor declares it yet.
        """
        uri = namespace_uri(namespace)
        nsmap = None
        if uri not in parent.nsmap.values():
            prefix = self._prefix_for(uri)
            nsmap = {prefix: uri}
        return etree.SubElement(parent, qname(local_name, uri), attrib, nsmap=nsmap)

    def find_or_create(
        self,
        parent: "etree._Element",
        local_name: str,
        namespace: NamespaceLike = enums.Namespace.UNATTEND,
    ) -> "etree._Element":
        """
        The primitive all higher level operations build on.

        :return: The existing child or a newly appended one.
        """
        element = self.find(parent, local_name, namespace)
        if element is None:
            element = self.create(parent, local_name, namespace)
        return element

    def set_text(
        self,
        parent: "etree._Element",
        local_name: str,
        value: str,
        namespace: NamespaceLike = enums.Namespace.UNATTEND,
    ) -> "etree._Element":
        """
        Upsert a child element holding ``value`` as its text.

        :raises ValueError: In case ``value`` is not valid element text. Nothing is created in that case.
        """
        self.check_text(value)
        element = self.find_or_create(parent, local_name, namespace)
        element.text = value
        return element

    @staticmethod
    def check_text(value: str) -> str:
        """
        Make sure lxml accepts ``value`` as element text. Operations call this for every value before their first
        mutation so that a rejected value never leaves a half built subtree behind.

        :raises ValueError: In case the value contains characters that cannot be represented in XML.
        :return: The unchanged value.
        """
        etree.Element("check").text = value
        return value

    @staticmethod
    def set_attribute(
        element: "etree._Element",
        local_name: str,
        value: str,
        namespace: Optional[NamespaceLike] = None,
    ) -> None:
        if namespace is None:
            element.set(local_name, value)
        else:
            element.set(qname(local_name, namespace), value)

    def iter_passes(self) -> Iterator["etree._Element"]:
        return self.root.iterchildren(qname("settings"))

    def find_pass(
        self, pass_name: Union[enums.ConfigurationPass, str]
    ) -> Optional["etree._Element"]:
        """
        :return: The ``settings`` element of the given configuration pass or None.
        """
        name = enums.ConfigurationPass.to_enum(pass_name).value
        for settings_element in self.iter_passes():
            if settings_element.get("pass") == name:
                return settings_element
        return None

    def find_or_create_pass(
        self, pass_name: Union[enums.ConfigurationPass, str]
    ) -> "etree._Element":
        name = enums.ConfigurationPass.to_enum(pass_name).value
        settings_element = self.find_pass(name)
        if settings_element is None:
            logger.debug("creating configuration pass %s", name)
            settings_element = self.create(self.root, "settings", attrib={"pass": name})
        return settings_element

    def find_component(
        self,
        pass_element: Optional["etree._Element"],
        component_name: Union[enums.ComponentName, str],
    ) -> Optional["etree._Element"]:
        """
        :return: The component with the given name inside the pass or None. None is also returned if the pass itself
                 is None.
        """
        if pass_element is None:
            return None
        if isinstance(component_name, enums.ComponentName):
            component_name = component_name.value
        for component in pass_element.iterchildren(qname("component")):
            if component.get("name") == component_name:
                return component
        return None

    def find_or_create_component(
        self,
        pass_element: "etree._Element",
        component_name: Union[enums.ComponentName, str],
    ) -> "etree._Element":
        """
        Return the component, creating it with the fixed attribute set from the settings if absent. Attributes of an
        existing component are left as they are.
        """
        if isinstance(component_name, enums.ComponentName):
            component_name = component_name.value
        component = self.find_component(pass_element, component_name)
        if component is None:
            logger.debug(
                "creating component %s in pass %s",
                component_name,
                pass_element.get("pass"),
            )
            attrib = {"name": component_name}
            attrib.update(self.settings.component_attributes())
            component = etree.SubElement(
                pass_element,
                qname("component"),
                attrib,
                nsmap={
                    "wcm": enums.Namespace.WCM.value,
                    "xsi": enums.Namespace.XSI.value,
                },
            )
        return component

    def component(
        self,
        pass_name: Union[enums.ConfigurationPass, str],
        component_name: Union[enums.ComponentName, str],
    ) -> "etree._Element":
        """
        Find or create a pass and a component inside it in one go.
        """
        return self.find_or_create_component(
            self.find_or_create_pass(pass_name), component_name
        )

    def find_extension_block(self) -> Optional["etree._Element"]:
        return self.find(
            self.root, self.settings.extension_block_name, self.extension_namespace
        )

    def extension_block(self) -> "etree._Element":
        """
        The single subtree in the extension namespace. The setup engine ignores it.
        """
        return self.find_or_create(
            self.root, self.settings.extension_block_name, self.extension_namespace
        )

    def tostring(self) -> bytes:
        """
        Serialize the document: explicit declaration, UTF-8 without byte order mark, indented.
        """
        self.ensure_root()
        body = etree.tostring(
            self.tree, encoding="utf-8", xml_declaration=False, pretty_print=True
        )
        return XML_DECLARATION + body

    def save(self, path: Optional[Union[str, os.PathLike]] = None) -> pathlib.Path:
        """
        Write the complete document. Every public mutation calls this as its last step.

        :param path: Overrides the path of this handle for this single write.
        :raises SerializationError: In case the file cannot be written. The in-memory tree keeps the change.
        :return: The path that was written.
        """
        target = pathlib.Path(path) if path is not None else self.path
        data = self.tostring()
        try:
            filesystem_helpers.mkdir(target.parent)
            filesystem_helpers.atomic_write(target, data)
        except (OSError, CX) as error:
            raise SerializationError(
                "Error writing answer file %s: %s", str(target), str(error)
            ) from error
        logger.info("Answer file written to %s", target)
        return target
