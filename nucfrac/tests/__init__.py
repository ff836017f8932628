# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Helpers building synthetic BAM files for the Nucfrac tests."""

import pysam

READ_LEN = 20

CONTIGS = [('chr1', 1000), ('chr2', 600)]


def write_bam(path, contigs, reads, index=True, sort_order='coordinate'):
    """Write a small BAM file.

    Args:
        path: Output path.
        contigs: ``[(name, length), ...]``.
        reads: ``[(contig, start, {tag: value}), ...]``; written in
            coordinate order.
        index: Create a .bai index.
        sort_order: Value of the @HD SO field.
    """
    header = pysam.AlignmentHeader.from_dict({
        'HD': {'VN': '1.6', 'SO': sort_order},
        'SQ': [{'SN': name, 'LN': length} for name, length in contigs],
    })
    tid = {name: i for i, (name, _) in enumerate(contigs)}
    reads = sorted(reads, key=lambda r: (tid[r[0]], r[1]))
    with pysam.AlignmentFile(path, 'wb', header=header) as out:
        for n, (contig, start, tags) in enumerate(reads):
            aln = pysam.AlignedSegment(header)
            aln.query_name = f'read{n:05d}'
            aln.query_sequence = 'A' * READ_LEN
            aln.flag = 0
            aln.reference_id = tid[contig]
            aln.reference_start = start
            aln.mapping_quality = 255
            aln.cigartuples = [(0, READ_LEN)]
            aln.query_qualities = pysam.qualitystring_to_array('F' * READ_LEN)
            for tag, value in tags.items():
                aln.set_tag(tag, value, value_type='A' if tag == 'RE' else 'Z')
            out.write(aln)
    if index:
        pysam.index(path)
    return path


def tagged(contig, start, barcode=None, region=None):
    tags = {}
    if barcode is not None:
        tags['CB'] = barcode
    if region is not None:
        tags['RE'] = region
    return (contig, start, tags)


def scenario_reads():
    """Barcode A: 10 exonic. Barcode B: 4 exonic + 4 intronic. Barcode C: none.

    Reads sit on both contigs, including on and across the tile boundaries
    of a 4-tile split (chr1:500, chr2:300), plus records that must be
    skipped.
    """
    reads = []
    for pos in (0, 120, 240, 480, 495, 500, 610, 730, 850, 975):
        reads.append(tagged('chr1', pos, BARCODE_A, 'E'))
    for pos, region in ((10, 'E'), (290, 'N'), (299, 'E'), (300, 'N'),
                        (310, 'E'), (450, 'N'), (560, 'E'), (575, 'N')):
        reads.append(tagged('chr2', pos, BARCODE_B, region))
    # Records that are skipped
    reads.append(tagged('chr1', 300, None, 'E'))
    reads.append(tagged('chr1', 310, BARCODE_A, None))
    reads.append(tagged('chr2', 100, BARCODE_B, 'X'))
    return reads


BARCODE_A = 'AAACCTGAGAAACCAT-1'
BARCODE_B = 'AAACCTGAGAAACCGC-1'
BARCODE_C = 'AAACCTGAGAAACCTA-1'
BARCODE_D = 'AAACCTGAGAAAGTGG-1'
