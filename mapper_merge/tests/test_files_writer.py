"""
Tests for MapperFilesWriter.

Uses InMemoryProject for dispatch rules and LocalProject on tmp_path for the
end-to-end behaviour on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mapper_merge.writer import (
    GeneratedBatch,
    GeneratedMapperFile,
    GeneratedSourceFile,
    InMemoryProject,
    InvalidUpstreamArtifacts,
    LocalProject,
    MapperFilesWriter,
    parse_document,
    serialize_document,
)

MAPPERS_DIR = Path(__file__).parent / "test_data" / "mappers"

MAPPER_PATH = "src/main/resources/com/example/dao/UserMapper.xml"
INTERFACE_PATH = "src/main/java/com/example/dao/UserMapper.java"
MODEL_PATH = "src/main/java/com/example/model/User.java"


def read_mapper(name: str) -> str:
    return (MAPPERS_DIR / name).read_text(encoding="utf-8")


def mapper_file(content: str) -> GeneratedMapperFile:
    return GeneratedMapperFile(
        target_root="src/main/resources",
        target_package="com.example.dao",
        file_name="UserMapper.xml",
        content=content,
    )


def interface_file(content: str = "public interface UserMapper {}\n") -> GeneratedSourceFile:
    return GeneratedSourceFile(
        target_root="src/main/java",
        target_package="com.example.dao",
        file_name="UserMapper.java",
        content=content,
        overwrite=True,
    )


def model_file(content: str = "public class User {}\n") -> GeneratedSourceFile:
    return GeneratedSourceFile(
        target_root="src/main/java",
        target_package="com.example.model",
        file_name="User.java",
        content=content,
        overwrite=False,
    )


class TestInvalidUpstream:
    """The batch must carry both lists."""

    def test_missing_source_files_raises(self):
        batch = GeneratedBatch(source_files=None, mapper_files=[])

        with pytest.raises(InvalidUpstreamArtifacts, match="source files"):
            MapperFilesWriter(InMemoryProject(), batch)

    def test_missing_mapper_files_raises(self):
        batch = GeneratedBatch(source_files=[], mapper_files=None)

        with pytest.raises(InvalidUpstreamArtifacts, match="mapper files"):
            MapperFilesWriter(InMemoryProject(), batch)

    def test_empty_lists_are_valid(self):
        writer = MapperFilesWriter(InMemoryProject(), GeneratedBatch(source_files=[], mapper_files=[]))

        report = writer.write_all()

        assert report.written == []


class TestSourceFiles:
    """Overwrite flag handling for generated source files."""

    def test_create_once_file_is_not_overwritten(self):
        """An existing hand-edited file is left byte for byte."""
        original = b"public class User { /* hand edited */ }\n"
        project = InMemoryProject({MODEL_PATH: original})
        writer = MapperFilesWriter(project, GeneratedBatch(source_files=[model_file()], mapper_files=[]))

        report = writer.write_all()

        assert project.files[MODEL_PATH] == original
        assert report.skipped == [MODEL_PATH]
        assert report.written == []

    def test_create_once_file_is_created_when_absent(self):
        project = InMemoryProject()
        writer = MapperFilesWriter(project, GeneratedBatch(source_files=[model_file()], mapper_files=[]))

        writer.write_all()

        assert project.read_text(MODEL_PATH) == "public class User {}\n"

    def test_overwrite_file_replaces_existing(self):
        project = InMemoryProject({INTERFACE_PATH: b"stale"})
        writer = MapperFilesWriter(project, GeneratedBatch(source_files=[interface_file()], mapper_files=[]))

        report = writer.write_all()

        assert project.read_text(INTERFACE_PATH) == "public interface UserMapper {}\n"
        assert report.written == [INTERFACE_PATH]


class TestMapperFiles:
    """Mapper files are reconciled, then always written."""

    def test_new_mapper_is_written_canonically(self):
        generated = read_mapper("generated_user_mapper.xml")
        project = InMemoryProject()
        writer = MapperFilesWriter(project, GeneratedBatch(source_files=[], mapper_files=[mapper_file(generated)]))

        writer.write_all()

        assert project.read_text(MAPPER_PATH) == serialize_document(parse_document(generated))

    def test_existing_mapper_is_merged(self):
        project = InMemoryProject({MAPPER_PATH: read_mapper("existing_user_mapper.xml").encode("utf-8")})
        batch = GeneratedBatch(source_files=[], mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))])

        report = MapperFilesWriter(project, batch).write_all()

        merged = parse_document(project.files[MAPPER_PATH])
        assert "selectByName" in merged.ids
        assert "touch" in merged.ids
        assert "insert" in merged.ids
        assert "email" in merged.statements["Base_Column_List"].body
        assert report.fallbacks == []

    def test_broken_mapper_falls_back_without_error(self, caplog):
        """An unparsable mapper on disk is regenerated and a warning is logged."""
        generated = read_mapper("generated_user_mapper.xml")
        project = InMemoryProject({MAPPER_PATH: read_mapper("broken_user_mapper.xml").encode("utf-8")})
        batch = GeneratedBatch(source_files=[], mapper_files=[mapper_file(generated)])

        with caplog.at_level(logging.WARNING, logger="mapper_merge.writer.files_writer"):
            report = MapperFilesWriter(project, batch).write_all()

        assert project.read_text(MAPPER_PATH) == serialize_document(parse_document(generated))
        assert [path for path, _ in report.fallbacks] == [MAPPER_PATH]
        assert MAPPER_PATH in caplog.text

    def test_rerun_is_a_no_op(self):
        """Writing the same batch twice leaves the merged mapper unchanged."""
        project = InMemoryProject({MAPPER_PATH: read_mapper("existing_user_mapper.xml").encode("utf-8")})
        batch = GeneratedBatch(source_files=[], mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))])

        MapperFilesWriter(project, batch).write_all()
        first = project.files[MAPPER_PATH]
        MapperFilesWriter(project, batch).write_all()

        assert project.files[MAPPER_PATH] == first


class TestWriteAll:
    """Ordering, logging and error propagation."""

    def test_source_files_are_written_before_mappers(self):
        batch = GeneratedBatch(
            source_files=[interface_file(), model_file()],
            mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))],
        )

        report = MapperFilesWriter(InMemoryProject(), batch).write_all()

        assert report.written == [INTERFACE_PATH, MODEL_PATH, MAPPER_PATH]

    def test_completion_is_logged_once(self, caplog):
        batch = GeneratedBatch(source_files=[interface_file()], mapper_files=[])

        with caplog.at_level(logging.INFO, logger="mapper_merge.writer.files_writer"):
            MapperFilesWriter(InMemoryProject(), batch).write_all()

        assert caplog.text.count("Files have been generated") == 1

    def test_write_error_stops_the_batch(self):
        """Files written before a failure stay written, later ones are not attempted."""

        class FailingProject(InMemoryProject):
            def create_and_write(self, path, text):
                if path == MODEL_PATH:
                    raise OSError("disk full")
                super().create_and_write(path, text)

        project = FailingProject()
        batch = GeneratedBatch(
            source_files=[interface_file(), model_file()],
            mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))],
        )

        with pytest.raises(OSError, match="disk full"):
            MapperFilesWriter(project, batch).write_all()

        assert list(project.files) == [INTERFACE_PATH]

    def test_existing_mapper_stream_is_closed(self):
        """The read handle on the existing mapper is closed after reading."""
        opened = []

        class TrackingProject(InMemoryProject):
            def open_for_read(self, path):
                stream = super().open_for_read(path)
                opened.append(stream)
                return stream

        project = TrackingProject({MAPPER_PATH: b"not xml"})
        batch = GeneratedBatch(source_files=[], mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))])

        MapperFilesWriter(project, batch).write_all()

        assert len(opened) == 1
        assert opened[0].closed

    def test_writes_to_local_project(self, tmp_path):
        (tmp_path / MAPPER_PATH).parent.mkdir(parents=True)
        (tmp_path / MAPPER_PATH).write_text(read_mapper("existing_user_mapper.xml"), encoding="utf-8")
        batch = GeneratedBatch(
            source_files=[interface_file(), model_file()],
            mapper_files=[mapper_file(read_mapper("generated_user_mapper.xml"))],
        )

        MapperFilesWriter(LocalProject(tmp_path), batch).write_all()

        assert (tmp_path / INTERFACE_PATH).read_text(encoding="utf-8") == "public interface UserMapper {}\n"
        assert (tmp_path / MODEL_PATH).exists()
        merged = parse_document((tmp_path / MAPPER_PATH).read_bytes())
        assert merged.ids[-2:] == ["deleteByPrimaryKey", "insert"]
