"""Module identities from PE images and minidumps.

The supplier is normally driven by a stack walker that already knows each
module's debug file and identifier. These helpers recover the same data
from a binary on disk or from a minidump's module list.
"""
from __future__ import annotations

import os
import struct
from typing import List, Optional

from . import console
from .models import CodeModule
from .path_builder import strip_pathname

try:
    from minidump.minidumpfile import MinidumpFile
    HAS_MINIDUMP = True
except ImportError:
    MinidumpFile = None
    HAS_MINIDUMP = False

CV_SIGNATURE_RSDS = 0x53445352  # 'RSDS' (PDB 7.0)


def format_debug_identifier(guid_bytes_le: bytes, age: int) -> str:
    """Breakpad debug identifier: GUID fields in hex, then age in hex.

    Example: ``2D0F9CA3B5C34E2E8B1F4A5C6D7E8F901``.
    """
    if len(guid_bytes_le) < 16:
        return ""
    data1, data2, data3, data4 = struct.unpack("<IHH8s", guid_bytes_le[:16])
    return f"{data1:08X}{data2:04X}{data3:04X}{data4.hex().upper()}{int(age):X}"


def _read_codeview(data: bytes, offset: int) -> Optional[tuple]:
    """Parse an RSDS record at ``offset`` into (pdb name, debug identifier)."""
    if offset < 0 or offset + 24 > len(data):
        return None
    if data[offset:offset + 4] != b"RSDS":
        return None

    guid_bytes = data[offset + 4:offset + 20]
    age = struct.unpack_from("<I", data, offset + 20)[0]

    # PDB path is null-terminated string
    pdb_path_bytes = data[offset + 24:offset + 24 + 260]
    pdb_path = pdb_path_bytes.split(b"\x00", 1)[0].decode("utf-8", errors="ignore")
    return strip_pathname(pdb_path), format_debug_identifier(guid_bytes, age)


def module_from_pe(pe_path: str) -> Optional[CodeModule]:
    """Build a module from a PE file's CodeView (RSDS) debug record."""
    if not pe_path or not os.path.exists(pe_path):
        console.warn(f"Cannot extract PDB info: file not found at {pe_path}")
        return None

    try:
        with open(pe_path, "rb") as f:
            data = f.read()
    except OSError as e:
        console.error(f"Cannot read {pe_path}: {e}")
        return None

    if len(data) < 0x40:
        return None

    # DOS header e_lfanew
    e_lfanew = struct.unpack_from("<I", data, 0x3C)[0]
    if e_lfanew <= 0 or e_lfanew + 24 > len(data):
        return None

    # PE signature
    if data[e_lfanew:e_lfanew + 4] != b"PE\x00\x00":
        return None

    # File header
    file_header_off = e_lfanew + 4
    _, num_sections, _, _, _, size_opt_header, _ = struct.unpack_from("<HHIIIHH", data, file_header_off)

    # Optional header
    opt_off = file_header_off + 20
    if opt_off + size_opt_header > len(data) or size_opt_header < 2:
        return None

    magic = struct.unpack_from("<H", data, opt_off)[0]
    data_dir_off = opt_off + (112 if magic == 0x20B else 96)
    if data_dir_off + 8 * 7 > opt_off + size_opt_header:
        return None

    # IMAGE_DIRECTORY_ENTRY_DEBUG = index 6
    debug_rva, debug_size = struct.unpack_from("<II", data, data_dir_off + 8 * 6)
    if debug_rva == 0 or debug_size == 0:
        return None

    # Section table
    sections_off = opt_off + size_opt_header
    sections = []
    for i in range(num_sections):
        sec_off = sections_off + i * 40
        if sec_off + 40 > len(data):
            break
        virtual_size, virtual_address, size_raw, ptr_raw = struct.unpack_from("<IIII", data, sec_off + 8)
        sections.append((virtual_address, max(virtual_size, size_raw), ptr_raw, size_raw))

    def rva_to_file_offset(rva: int) -> Optional[int]:
        for va, vsz, ptr, rawsz in sections:
            if va <= rva < va + vsz:
                delta = rva - va
                if delta < rawsz:
                    return ptr + delta
        return None

    debug_off = rva_to_file_offset(debug_rva)
    if debug_off is None:
        return None

    # IMAGE_DEBUG_DIRECTORY entries (28 bytes each)
    entry_size = 28
    for i in range(debug_size // entry_size):
        off = debug_off + i * entry_size
        if off + entry_size > len(data):
            break
        _, _, _, _, debug_type, _, addr_raw, ptr_raw = struct.unpack_from("<IIHHIIII", data, off)

        # CodeView debug info = 2
        if debug_type != 2:
            continue

        cv_off = ptr_raw if ptr_raw != 0 else rva_to_file_offset(addr_raw)
        record = _read_codeview(data, cv_off if cv_off is not None else -1)
        if record and record[0]:
            pdb_name, identifier = record
            console.log(f"+ Found: {pdb_name} ({identifier}) in {pe_path}")
            return CodeModule(
                code_file=pe_path,
                debug_file=pdb_name,
                debug_identifier=identifier,
            )

    console.log(f"- Could not extract RSDS data from {pe_path}")
    return None


def _format_version(ms: int, ls: int) -> str:
    if not ms and not ls:
        return ""
    return f"{(ms >> 16) & 0xFFFF}.{ms & 0xFFFF}.{(ls >> 16) & 0xFFFF}.{ls & 0xFFFF}"


def _module_version(module) -> str:
    vs_info = getattr(module, 'versioninfo', None) or getattr(module, 'vs_info', None)
    if not vs_info:
        return ""
    ms = getattr(vs_info, 'dwFileVersionMS', None) or getattr(vs_info, 'FileVersionMS', 0) or 0
    ls = getattr(vs_info, 'dwFileVersionLS', None) or getattr(vs_info, 'FileVersionLS', 0) or 0
    return _format_version(int(ms), int(ls))


def _module_codeview(module) -> tuple:
    """(pdb name, debug identifier) from a parsed CodeView record, if any."""
    cv_record = getattr(module, 'cv_record', None) or getattr(module, 'CvRecord', None)
    if not cv_record:
        return "", ""

    cv_sig = getattr(cv_record, 'CvSignature', None) or getattr(cv_record, 'cv_signature', None)
    if cv_sig and cv_sig != CV_SIGNATURE_RSDS:
        return "", ""

    pdb_name = getattr(cv_record, 'PdbFileName', None) or getattr(cv_record, 'pdb_file_name', None) or ""
    if isinstance(pdb_name, bytes):
        pdb_name = pdb_name.decode('utf-8', errors='replace').rstrip('\x00')

    identifier = ""
    guid = getattr(cv_record, 'Signature', None) or getattr(cv_record, 'signature', None)
    age = getattr(cv_record, 'Age', None) or getattr(cv_record, 'age', None) or 0
    if guid is not None:
        if hasattr(guid, 'bytes_le'):
            identifier = format_debug_identifier(guid.bytes_le, age)
        elif isinstance(guid, bytes):
            identifier = format_debug_identifier(guid, age)
    return strip_pathname(str(pdb_name)), identifier


def modules_from_minidump(dump_path: str) -> List[CodeModule]:
    """List the loaded modules of a minidump as module identities."""
    if not HAS_MINIDUMP:
        console.error("minidump library not available for reading dumps")
        return []

    try:
        md = MinidumpFile.parse(dump_path)
    except Exception as e:
        console.error(f"Cannot parse minidump {dump_path}: {type(e).__name__}: {e}")
        return []

    module_list = getattr(md, 'modules', None)
    raw_modules = getattr(module_list, 'modules', None) or []

    modules = []
    for module in raw_modules:
        name = str(getattr(module, 'name', '') or '')
        if not name:
            continue
        debug_file, identifier = _module_codeview(module)
        modules.append(CodeModule(
            code_file=name,
            debug_file=debug_file,
            debug_identifier=identifier,
            version=_module_version(module),
        ))

    console.log(f"Read {len(modules)} modules from {dump_path}")
    return modules
