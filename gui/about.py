about_html = """<h2>FATManager</h2>

        <p>A small desktop tool for files stored in a FAT-style record store:
        every file is a directory entry plus a chain of 20-character blocks,
        each block saved as its own record.</p>

        <p><b>Features:</b></p>
        <table border="0" width="100%">
        <tr>
        <td valign="top" width="50%">
        <ul>
        <li>Open any folder as a record store</li>
        <li>Create files and type their content</li>
        <li>Open files (content reassembled from the block chain)</li>
        <li>Edit files (old chain freed, new chain written tail first)</li>
        </ul>
        </td>

        <td valign="top" width="50%">
        <ul>
        <li>Delete to the Recycle Bin and restore</li>
        <li>Filter files by name</li>
        <li>Integrity check (broken chains, size mismatches, orphaned blocks)</li>
        <li>Remembers last opened store and settings</li>
        </ul>
        </td>
        </tr>
        </table>

        <p><b>Keyboard Shortcuts:</b></p>
        <table border="0" width="100%">
        <tr>
        <td valign="top" width="50%">
        <ul>
        <li>Ctrl+N - New file</li>
        <li>Ctrl+O - Open store</li>
        <li>Ctrl+W - Close store</li>
        <li>Enter - Open selected file</li>
        </ul>
        </td>
        <td valign="top" width="50%">
        <ul>
        <li>Ctrl+E - Edit selected file</li>
        <li>Ctrl+R - Restore selected file</li>
        <li>Ctrl+Q - Exit FATManager</li>
        <li>Del - Move selected file to the Recycle Bin</li>
        </ul>
        </td>
        </tr>
        </table>

        <p align="center"><small>© 2026 Stephen P Smith | MIT License</small></p>
        """
