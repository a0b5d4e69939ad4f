import io
import posixpath
import zipfile
import zlib

from app.analysis.models import Document
from app.archive.exceptions import ArchiveError
from app.logging.logger import Log


class ArchiveUnpacker:
    """Reads the PDF entries of an uploaded ZIP archive, in archive order."""

    def unpack(self, zip_bytes: bytes) -> list[Document]:
        """Return one Document per ``.pdf`` file entry.

        Directories and other file types are skipped. The entry's base name
        becomes the document file name.

        Raises:
            ArchiveError: if the archive is corrupt or unreadable.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(zip_bytes)) as archive:
                documents = [
                    Document(
                        file_name=posixpath.basename(info.filename),
                        raw_bytes=archive.read(info),
                    )
                    for info in archive.infolist()
                    if not info.is_dir() and info.filename.lower().endswith(".pdf")
                ]
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            NotImplementedError,
            RuntimeError,
            OSError,
            EOFError,
        ) as exc:
            raise ArchiveError(f"Cannot read archive: {exc}") from exc

        Log.info(f"Archive holds {len(documents)} PDF files")
        for index, document in enumerate(documents, start=1):
            Log.debug(f"  {index}. {document.file_name} ({len(document.raw_bytes)} bytes)")
        return documents
