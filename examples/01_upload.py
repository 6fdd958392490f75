"""
Upload videos with progress
"""
import asyncio
from mediaqueue import UploadQueue


async def main():
    async with UploadQueue(
        upload_url="https://example.com/api/videos/upload",
        csrf_token="token-from-page",
        concurrent_uploads=2
    ) as queue:

        # Progress per file and for the whole queue
        def on_progress(item, progress, overall):
            print(f"{item.name}: {progress}% (queue {overall}%)")

        queue.on('progress', on_progress)
        queue.on('file_complete', lambda item, ok, payload: print(
            f"{item.name}: {'done' if ok else payload}"
        ))

        # Unsupported formats are rejected, not queued
        added = queue.add_files(["intro.mp4", "talk.mov", "notes.txt"])
        print(f"Added {added.added}, rejected {added.rejected_files}")

        summary = await queue.start_upload()
        print(f"{summary.success} succeeded, {summary.failed} failed")

        # Only failed files are sent again
        if summary.failed:
            summary = await queue.retry_failed()
            print(f"After retry: {summary.success} succeeded")


if __name__ == "__main__":
    asyncio.run(main())
